from arbedge.main import main

main()
