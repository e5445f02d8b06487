"""Map operation results to HTTP responses."""

import falcon
import falcon.asgi

from contentgov.application.dto.operation_result import OperationResult

ERROR_STATUS: dict[str, str] = {
    "NotFound": falcon.HTTP_404,
    "ContentNotFound": falcon.HTTP_404,
    "ValidationError": falcon.HTTP_400,
    "IncompatibleCapabilities": falcon.HTTP_400,
    "NothingToCopy": falcon.HTTP_400,
    "NoCompatibleCapabilities": falcon.HTTP_400,
    "GranteeInvalid": falcon.HTTP_422,
    "GranteeNotFound": falcon.HTTP_422,
    "RepositoryError": falcon.HTTP_502,
}


def status_for(code: str) -> str:
    return ERROR_STATUS.get(code, falcon.HTTP_500)


def send_result(resp: falcon.asgi.Response, result: OperationResult) -> None:
    """Write ``result`` as the response body with a matching status."""
    resp.media = result.to_dict()
    if result.ok:
        resp.status = falcon.HTTP_200
    else:
        resp.status = status_for(result.error.code if result.error else "")
