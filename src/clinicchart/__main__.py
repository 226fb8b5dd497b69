from clinicchart.cli import main

main()
