from quicktest.cli import main

main()
