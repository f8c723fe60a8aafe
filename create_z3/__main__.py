from create_z3.cli import main

main()
