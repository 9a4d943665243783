from pulsescan.cli import main

raise SystemExit(main())
