# conditionalmarkets/__init__.py

from loguru import logger

# Library code stays quiet until the application opts in.
logger.disable("conditionalmarkets")
