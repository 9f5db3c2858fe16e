from bob.cli.app import main

main()
