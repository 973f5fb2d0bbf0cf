from flowlayout.cli import main

main()
