from writer_ai_service.cli import main

main(prog_name="writer-ai-service")
