from logo_png.cli.main import main

main()
