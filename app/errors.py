# app/errors.py


class RelayError(Exception):
    """Error base del relay de notificaciones."""


class ConfigError(RelayError):
    pass


class ProfileStoreError(RelayError):
    """No se pudo consultar el perfil del usuario (red, credenciales, 5xx)."""


class GatewayError(RelayError):
    """Fallo de transporte hacia el gateway de push."""


class GatewayTimeout(GatewayError):
    pass


class GatewayUnreachable(GatewayError):
    pass


class GatewayAuthError(GatewayError):
    """El gateway rechazó nuestra credencial (EXPO_ACCESS_TOKEN)."""
