from agentbridge.cli.main import main

main()
