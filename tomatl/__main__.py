from tomatl.main import main

raise SystemExit(main())
