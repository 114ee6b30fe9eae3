from storekeeper import create_app

app = create_app()
