from algoclient.entrypoint.handler import EntryPoint, InputShape
from algoclient.entrypoint.runner import setup_handler
