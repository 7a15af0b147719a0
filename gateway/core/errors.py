class GatewayError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthRequired(GatewayError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class InvalidSession(AuthRequired):
    def __init__(self, message: str = "Invalid session"):
        super().__init__(message)


class RouteNotMapped(GatewayError):
    """The web layer resolved a pattern the route table does not know.

    Only happens when the path router and the route table drift apart.
    """

    def __init__(self, route_key: str):
        super().__init__(f"Route not mapped: {route_key}")
        self.route_key = route_key


class DuplicateRouteError(ValueError):
    def __init__(self, route_key: str):
        super().__init__(f"Duplicate route: {route_key}")
        self.route_key = route_key
