from chefmate.cli import main

main()
