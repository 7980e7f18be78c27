from semcommit.cli.app import main

main()
