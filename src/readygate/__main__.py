from readygate.cli import main

main()
