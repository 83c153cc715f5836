"""
Dependencias para inyeccion de casos de uso.
"""
from fastapi import Request

from app.application.use_cases.sync_use_cases import SyncUseCases


def get_sync_use_cases(request: Request) -> SyncUseCases:
    """
    Dependencia para obtener los casos de uso de sync.

    La instancia se construye en el startup (app.core.events) y vive
    en app.state durante toda la vida del proceso.

    Returns:
        SyncUseCases: Instancia compartida de casos de uso de sync
    """
    return request.app.state.sync_use_cases
