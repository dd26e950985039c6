from tagship.cli.app import main

main()
