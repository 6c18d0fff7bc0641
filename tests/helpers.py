from clinihof.core.security import get_password_hash
from clinihof.core.utils import generate_slug
from clinihof.db.models import User, UserRole, Workspace, WorkspaceStatus
from clinihof.schemas.auth import SessionUser
from clinihof.services.workspace_service import TenantContext

PASSWORD = "secret123"


class FakeTokenStore:
    """In-memory stand-in for the Redis session registry."""

    def __init__(self):
        self.tokens = {}

    async def set_token(self, token, value, expire):
        self.tokens[token] = value

    async def get_token(self, token):
        return self.tokens.get(token)

    async def delete_token(self, token):
        self.tokens.pop(token, None)

    async def close(self):
        pass


async def create_account(
    session_maker,
    email,
    role=UserRole.ADMIN,
    workspace_name="Clinica Teste",
    status=WorkspaceStatus.ACTIVE,
    owns_workspace=True,
    member_of=None,
):
    """Insert a user (and the workspace they own) straight into the database."""
    async with session_maker() as session:
        user = User(
            email=email,
            name=email.split("@")[0].title(),
            role=role,
            password_hash=get_password_hash(PASSWORD),
            workspace_id=member_of,
        )
        session.add(user)
        await session.flush()

        workspace = None
        if owns_workspace:
            workspace = Workspace(
                name=workspace_name,
                slug=generate_slug(workspace_name),
                owner_id=user.id,
                status=status,
            )
            session.add(workspace)
            await session.flush()
            user.workspace_id = workspace.id
            session.add(user)

        await session.commit()
        return user, workspace


def session_user(user):
    return SessionUser(
        id=user.id,
        role=user.role,
        email=user.email,
        name=user.name,
        workspace_id=user.workspace_id,
    )


def tenant(user, workspace):
    return TenantContext(user=session_user(user), workspace=workspace)


async def login(client, email, password=PASSWORD):
    """Log in and return bearer headers; cookies are dropped so several users can share a client."""
    response = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
