from extract_code.cli import main

raise SystemExit(main())
