from live_nft.main import main

main()
