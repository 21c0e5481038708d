from unrate_chart.cli import main

raise SystemExit(main())
