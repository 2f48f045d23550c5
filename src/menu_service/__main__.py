from menu_service.main import run

run()
