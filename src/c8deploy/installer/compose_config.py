"""Host-specific edits to the extracted bundle's .env and docker-compose.yaml."""

import logging
import re
from pathlib import Path
from typing import Any, Dict

import yaml

from ..errors import MissingArtifactError

logger = logging.getLogger("c8deploy.compose")

WEB_MODELER_URL = "http://${HOST}:8070"
RESTAPI_COMMAND = '/bin/sh -c "java $JAVA_OPTIONS org.springframework.boot.loader.JarLauncher"'


class ComposeLoader(yaml.SafeLoader):
    """SafeLoader that reads booleans the way docker compose does: only true/false.

    Plain ``on``/``off``/``yes``/``no`` stay strings, so a rewrite does not
    turn them into booleans.
    """


ComposeLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
ComposeLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


class ComposeDumper(yaml.SafeDumper):
    """SafeDumper that writes shared nodes out in full instead of as aliases."""

    def ignore_aliases(self, data):
        return True


def set_env_values(env_file: Path, values: Dict[str, str]) -> None:
    """Rewrite ``KEY=...`` lines in a dotenv file; missing keys are appended."""
    if not env_file.is_file():
        raise MissingArtifactError(f".env file not found at {env_file}")

    text = env_file.read_text()
    for key, value in values.items():
        pattern = re.compile(rf"^{re.escape(key)}=.*$", re.MULTILINE)
        line = f"{key}={value}"
        if pattern.search(text):
            text = pattern.sub(lambda _: line, text)
        else:
            if text and not text.endswith("\n"):
                text += "\n"
            text += line + "\n"
    env_file.write_text(text)


def _service_env(services: Dict[str, Any], name: str) -> Dict[str, Any]:
    service = services.get(name) or {}
    services[name] = service
    env = service.get("environment")
    if env is None:
        env = service["environment"] = {}
    elif isinstance(env, list):
        # list form: ["KEY=value", ...]
        env = service["environment"] = dict(item.split("=", 1) if "=" in item else (item, "") for item in env)
    return env


def patch_compose(compose_file: Path, admin_user: str, admin_password: str) -> Dict[str, Any]:
    """Apply the Keycloak and Web Modeler settings to the compose descriptor."""
    if not compose_file.is_file():
        raise MissingArtifactError(f"docker-compose.yaml not found at {compose_file}")

    with open(compose_file) as f:
        document = yaml.load(f, Loader=ComposeLoader) or {}

    services = document.get("services") or {}
    document["services"] = services

    keycloak = _service_env(services, "keycloak")
    keycloak["KC_BOOTSTRAP_ADMIN_USERNAME"] = admin_user
    keycloak["KC_BOOTSTRAP_ADMIN_PASSWORD"] = admin_password

    _service_env(services, "web-modeler-restapi")["RESTAPI_SERVER_URL"] = WEB_MODELER_URL
    webapp = _service_env(services, "web-modeler-webapp")
    webapp["SERVER_URL"] = WEB_MODELER_URL
    webapp["CLIENT_PUSHER_HOST"] = "${HOST}"

    services["web-modeler-restapi"]["command"] = RESTAPI_COMMAND

    with open(compose_file, "w") as f:
        yaml.dump(document, f, Dumper=ComposeDumper, default_flow_style=False, sort_keys=False)

    return document


def configure_bundle(env_file: Path, compose_file: Path, host: str, admin_user: str, admin_password: str) -> None:
    set_env_values(env_file, {"HOST": host, "KEYCLOAK_HOST": host})
    logger.info(".env updated with HOST=%s", host)
    patch_compose(compose_file, admin_user, admin_password)
