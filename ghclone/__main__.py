from ghclone.cli.app import main

main()
