from treebark.cli import main

raise SystemExit(main())
