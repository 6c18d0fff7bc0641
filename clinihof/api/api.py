from fastapi import APIRouter
from clinihof.api.v1 import (
    account,
    auth,
    cashflow,
    collaborators,
    commissions,
    costs,
    master,
    packages,
    patients,
    permissions,
    procedures,
    quotes,
    sales,
    sessions,
    settings,
    supplies,
    team,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(account.router, prefix="/account", tags=["account"])
api_router.include_router(permissions.router, prefix="/permissions", tags=["permissions"])
api_router.include_router(team.router, prefix="/team", tags=["team"])
api_router.include_router(patients.router, prefix="/patients", tags=["patients"])
api_router.include_router(procedures.router, prefix="/procedures", tags=["procedures"])
api_router.include_router(supplies.router, prefix="/supplies", tags=["supplies"])
api_router.include_router(packages.router, prefix="/packages", tags=["packages"])
api_router.include_router(collaborators.router, prefix="/collaborators", tags=["collaborators"])
api_router.include_router(costs.router, prefix="/costs", tags=["costs"])
api_router.include_router(sales.router, prefix="/sales", tags=["sales"])
api_router.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
api_router.include_router(sales.dashboard_router, prefix="/stats", tags=["stats"])
api_router.include_router(commissions.router, prefix="/commissions", tags=["commissions"])
api_router.include_router(cashflow.router, prefix="/cashflow", tags=["cashflow"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(master.router, prefix="/master", tags=["master"])
