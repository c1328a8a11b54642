from sett_pro.cli.main import main

main()
