from koiro_lyrics.cli import main

main()
