from unittest.mock import Mock

import pytest
import requests

from qa_ops.core.errors import ConfigurationError, GitHostError
from qa_ops.modules.branches.git_client import GitHostClient, get_git_client


def _response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.json = Mock(return_value=payload or {})
    return response


def _client(*responses, side_effect=None):
    session = Mock()
    session.headers = {}
    session.request = Mock(side_effect=side_effect or list(responses))
    return GitHostClient("https://git.example.com/api/v3/", "tkn", timeout=3, session=session), session


def test_auth_headers_are_installed():
    _, session = _client()
    assert session.headers["Authorization"] == "Bearer tkn"
    assert session.headers["Accept"] == "application/vnd.github+json"


def test_get_branch_sha():
    client, session = _client(_response(payload={"object": {"sha": "abc123"}}), _response(404))
    assert client.get_branch_sha("acme/app", "feature/qa env") == "abc123"
    method, url = session.request.call_args_list[0].args
    assert method == "GET"
    assert url == "https://git.example.com/api/v3/repos/acme/app/git/ref/heads/feature/qa%20env"
    assert client.get_branch_sha("acme/app", "gone") is None


def test_delete_branch_tolerates_missing_refs():
    client, session = _client(_response(204), _response(422), _response(404), _response(500))
    client.delete_branch("acme/app", "qa")
    client.delete_branch("acme/app", "qa")
    client.delete_branch("acme/app", "qa")
    with pytest.raises(GitHostError, match="HTTP 500"):
        client.delete_branch("acme/app", "qa")
    assert session.request.call_args_list[0].args[0] == "DELETE"


def test_create_branch_posts_ref():
    client, session = _client(_response(201), _response(422))
    client.create_branch("acme/app", "qa", "abc")
    call = session.request.call_args_list[0]
    assert call.args == ("POST", "https://git.example.com/api/v3/repos/acme/app/git/refs")
    assert call.kwargs["json"] == {"ref": "refs/heads/qa", "sha": "abc"}
    assert call.kwargs["timeout"] == 3
    with pytest.raises(GitHostError):
        client.create_branch("acme/app", "qa", "abc")


def test_transport_errors_are_wrapped():
    client, _ = _client(side_effect=requests.Timeout("slow"))
    with pytest.raises(GitHostError, match="slow"):
        client.get_branch_sha("acme/app", "qa")


def test_factory_requires_token():
    with pytest.raises(ConfigurationError):
        get_git_client()


def test_malformed_ref_payload_is_a_git_host_error():
    not_json = _response()
    not_json.json = Mock(side_effect=ValueError("no json"))
    client, _ = _client(not_json, _response(payload={"message": "moved"}))
    with pytest.raises(GitHostError, match="unexpected ref payload"):
        client.get_branch_sha("acme/app", "qa")
    with pytest.raises(GitHostError, match="unexpected ref payload"):
        client.get_branch_sha("acme/app", "qa")
