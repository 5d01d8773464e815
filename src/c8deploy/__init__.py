"""c8deploy - Camunda 8 docker-compose installer and health reporter"""

__version__ = "1.0.0"
