from jsonbind.cli import main

main()
