import logging
import uvicorn
from cineplay.utils.logger import setup_logging
from cineplay.api.server import create_app
from cineplay.config import API_HOST, API_PORT

# Initialize logging
setup_logging()
logger = logging.getLogger("cineplay")

def main():
    logger.info(f"Starting cineplay API on {API_HOST}:{API_PORT}")
    uvicorn.run(create_app(), host=API_HOST, port=API_PORT, log_config=None)

if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
