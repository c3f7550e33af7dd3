from linkdrift.cli.main import main

main()
