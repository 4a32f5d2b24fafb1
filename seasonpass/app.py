# module seasonpass.app
from seasonpass.app_setup.factory import create_app

# App globale
app = create_app()
