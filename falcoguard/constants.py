"""Names, file names and defaults shared across the extension."""

from datetime import timedelta

EXTENSION_TYPE = "shoot-falco-service"

SERVICE_NAME = EXTENSION_TYPE
EXTENSION_SERVICE_NAME = "extension-" + SERVICE_NAME
GARDENER_EXTENSION_SERVICE_NAME = "gardener-" + EXTENSION_SERVICE_NAME

# Managed resource holding the Falco deployment of a shoot.
MANAGED_RESOURCE_NAME_FALCO = EXTENSION_SERVICE_NAME + "-shoot"

# Secret in the shoot namespace that stores the Falco certificates.
FALCO_CERTIFICATES_SECRET_NAME = GARDENER_EXTENSION_SERVICE_NAME + "-certificates"

NAMESPACE_KUBE_SYSTEM = "kube-system"

# Name of the Falco chart deployed into shoot clusters.
FALCO_CHARTNAME = "falco"

FALCO_SERVER_CA_KEY = "server-ca.key"
FALCO_SERVER_CA_CERT = "server-ca.cert"
FALCO_CLIENT_CA_KEY = "client-ca.key"
FALCO_CLIENT_CA_CERT = "client-ca.crt"

FALCO_SERVER_KEY = "server.key"
FALCO_SERVER_CERT = "server.crt"
FALCO_CLIENT_KEY = "client.key"
FALCO_CLIENT_CERT = "client.crt"

DEFAULT_CA_LIFETIME = timedelta(hours=24 * 365 * 2)
DEFAULT_CA_RENEW_AFTER = DEFAULT_CA_LIFETIME - timedelta(seconds=60)

DEFAULT_CERTIFICATE_LIFETIME = timedelta(hours=24 * 180)
DEFAULT_CERTIFICATE_RENEW_AFTER = DEFAULT_CERTIFICATE_LIFETIME - timedelta(seconds=30)

FALCO_RULES = "falco_rules.yaml"
FALCO_INCUBATING_RULES = "falco-incubating_rules.yaml"
FALCO_SANDBOX_RULES = "falco-sandbox_rules.yaml"

PROJECT_ENABLE_ANNOTATION = "falco.gardener.cloud/enabled"

ALWAYS_ENABLED_PROJECTS = ("garden",)