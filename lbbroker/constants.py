import os

NBR_CLIENTS = int(os.environ.get('NBR_CLIENTS', 10))
NBR_WORKERS = int(os.environ.get('NBR_WORKERS', 3))

FRONTEND_URL = os.environ.get('FRONTEND_URL', 'inproc://frontend')
BACKEND_URL = os.environ.get('BACKEND_URL', 'inproc://backend')

# standalone processes (broker/worker/client over tcp)
BROKER_HOST = os.environ.get('BROKER_HOST', 'localhost')
FRONTEND_PORT = os.environ.get('FRONTEND_PORT', '7000')
BACKEND_PORT = os.environ.get('BACKEND_PORT', '6000')

POLL_TIMEOUT = int(os.environ.get('POLL_TIMEOUT', 64))  # milliseconds
READY_TIMEOUT = float(os.environ.get('READY_TIMEOUT', 10))  # seconds

PPP_READY = os.environ.get('PPP_READY', 'READY').encode('ascii')
PPP_ERROR = os.environ.get('PPP_ERROR', 'ERROR').encode('ascii')
DELIMITER = b''

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
