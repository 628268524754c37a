from timelapse.cli import main

raise SystemExit(main())
