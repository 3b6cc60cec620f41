from catalogsync.ui.cli import main

main()
