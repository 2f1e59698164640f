from cagent_security.cli import main

raise SystemExit(main())
