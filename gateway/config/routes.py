from gateway.core.backend import Backend
from gateway.core.route_table import RouteEntry, RouteTable


def build_route_table(backend: Backend) -> RouteTable:
    return RouteTable([
        # auth (public)
        RouteEntry("POST", "/api/auth/register",
                   lambda ctx: backend.register_user(ctx.body),
                   protected=False, error_status=400, name="registerUser"),
        RouteEntry("POST", "/api/auth/login",
                   lambda ctx: backend.login_user(ctx.body),
                   protected=False, error_status=401, name="loginUser"),

        # projects
        RouteEntry("GET", "/api/projects",
                   lambda ctx: backend.get_user_projects(ctx.user_id),
                   name="getUserProjects"),
        RouteEntry("POST", "/api/projects",
                   lambda ctx: backend.create_project(ctx.user_id, ctx.body),
                   name="createProject"),
        RouteEntry("GET", "/api/projects/:id",
                   lambda ctx: backend.get_project(ctx.user_id, ctx.path_params["id"]),
                   name="getProject"),
        RouteEntry("DELETE", "/api/projects/:id",
                   lambda ctx: backend.delete_project(ctx.user_id, ctx.path_params["id"]),
                   name="deleteProject"),

        # backend config
        RouteEntry("POST", "/api/projects/:id/configure-backend",
                   lambda ctx: backend.configure_project_backend(
                       ctx.user_id, ctx.path_params["id"], ctx.body),
                   name="configureProjectBackend"),
        RouteEntry("POST", "/api/projects/:id/test-backend",
                   lambda ctx: backend.test_project_backend(
                       ctx.user_id, ctx.path_params["id"], ctx.body),
                   name="testProjectBackend"),

        # data sync
        RouteEntry("GET", "/api/projects/:id/data",
                   lambda ctx: backend.get_project_data(
                       ctx.user_id, ctx.path_params["id"], dict(ctx.query)),
                   name="getProjectData"),
        RouteEntry("POST", "/api/projects/:id/data",
                   lambda ctx: backend.store_project_data(
                       ctx.user_id, ctx.path_params["id"], ctx.body),
                   name="storeProjectData"),

        RouteEntry("GET", "/api/health",
                   lambda ctx: backend.health_check(),
                   protected=False, name="healthCheck"),
    ])
