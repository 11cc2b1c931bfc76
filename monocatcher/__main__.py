from .mono_catcher import main

raise SystemExit(main())
