"""Connector generator: the SDK entry point holding base URL and auth."""

from saloon_sdkgen.config import GeneratorConfig
from saloon_sdkgen.generator.base import group_by_resource
from saloon_sdkgen.naming import safe_class_name, safe_variable_name
from saloon_sdkgen.parser.base import ApiSpecification, SecurityScheme
from saloon_sdkgen.phpgen import ClassType, Method, PhpFile, export

SALOON_CONNECTOR = "Saloon\\Http\\Connector"
TOKEN_AUTHENTICATOR = "Saloon\\Http\\Auth\\TokenAuthenticator"
BASIC_AUTHENTICATOR = "Saloon\\Http\\Auth\\BasicAuthenticator"
CLIENT_CREDENTIALS_GRANT = "Saloon\\Traits\\OAuth2\\ClientCredentialsGrant"
OAUTH_CONFIG = "Saloon\\Helpers\\OAuth2\\OAuthConfig"


def first_security_scheme(spec: ApiSpecification) -> SecurityScheme | None:
    if not spec.components or not spec.components.security_schemes:
        return None
    return next(iter(spec.components.security_schemes.values()))


class ConnectorGenerator:
    def __init__(self, config: GeneratorConfig):
        self.config = config

    def generate(self, spec: ApiSpecification) -> PhpFile:
        file = PhpFile()
        namespace = file.add_namespace(self.config.namespace)
        namespace.add_use(SALOON_CONNECTOR)

        class_type = ClassType(safe_class_name(self.config.connector_name), extends=SALOON_CONNECTOR)
        namespace.add(class_type)
        if spec.name:
            class_type.add_comment(spec.name)
        if spec.description:
            class_type.add_comment("")
            class_type.add_comment(spec.description.strip())

        constructor = class_type.add_method("__construct")

        resolve = class_type.add_method("resolveBaseUrl")
        resolve.return_type = "string"
        resolve.add_body(f"return {export(spec.base_url)};")

        scheme = first_security_scheme(spec)
        if scheme is not None:
            self._add_authentication(class_type, constructor, scheme)
        for use in class_type.traits:
            namespace.add_use(use)
        for method in class_type.methods:
            if method.return_type and "\\" in method.return_type:
                namespace.add_use(method.return_type)

        for resource_name in group_by_resource(spec, self.config):
            resource_fqn = f"{self.config.resource_namespace}\\{resource_name}"
            namespace.add_use(resource_fqn)
            accessor = class_type.add_method(safe_variable_name(resource_name))
            accessor.return_type = resource_fqn
            accessor.add_body(f"return new {resource_name}($this);")

        if not constructor.parameters:
            class_type.methods.remove(constructor)
        return file

    def _add_authentication(self, class_type: ClassType, constructor: Method, scheme: SecurityScheme):
        def promote(name: str) -> None:
            param = constructor.add_promoted_parameter(name, "string")
            param.visibility = "protected"

        if scheme.type == "apiKey":
            promote("apiKey")
            method_name = "defaultQuery" if scheme.location == "query" else "defaultHeaders"
            method = class_type.add_method(method_name)
            method.visibility = "protected"
            method.return_type = "array"
            method.add_body(f"return [{export(scheme.name or 'X-API-Key')} => $this->apiKey];")
        elif scheme.type == "http" and (scheme.scheme or "bearer").lower() == "basic":
            promote("username")
            promote("password")
            method = class_type.add_method("defaultAuth")
            method.visibility = "protected"
            method.return_type = BASIC_AUTHENTICATOR
            method.add_body("return new BasicAuthenticator($this->username, $this->password);")
        elif scheme.type == "http":
            promote("token")
            method = class_type.add_method("defaultAuth")
            method.visibility = "protected"
            method.return_type = TOKEN_AUTHENTICATOR
            method.add_body("return new TokenAuthenticator($this->token);")
        elif scheme.type == "oauth2":
            promote("clientId")
            promote("clientSecret")
            class_type.add_trait(CLIENT_CREDENTIALS_GRANT)
            method = class_type.add_method("defaultOauthConfig")
            method.visibility = "protected"
            method.return_type = OAUTH_CONFIG
            method.add_body(
                "return OAuthConfig::make()\n"
                "    ->setClientId($this->clientId)\n"
                "    ->setClientSecret($this->clientSecret)\n"
                f"    ->setTokenEndpoint({export(scheme.token_url or '/oauth/token')});"
            )
