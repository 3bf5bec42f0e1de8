from coinboard.cli import main

main()
