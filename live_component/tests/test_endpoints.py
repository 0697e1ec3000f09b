import json
import re
from datetime import datetime

import pytest
from django.urls import reverse

from demo.components import Counter
from demo.tests.factories import Entity1Factory
from live_component import dehydrated_query, factory, hydrator
from live_component.signals import component_action_performed, component_pre_rerender

pytestmark = pytest.mark.django_db

JSON_MEDIA_TYPE = "application/vnd.live-component+json"
CSRF_RE = re.compile(r'<div[^>]*\bdata-live-csrf-value="([^"]+)"')


def component_url(name, data=None, action=None):
    if action:
        path = reverse("live_component:action", args=[name, action])
    else:
        path = reverse("live_component:render", args=[name])
    if data is None:
        return path
    return f"{path}?{dehydrated_query(data)}"


def csrf_token(response):
    """Token rendered on the root element of the component."""
    match = CSRF_RE.search(response.content.decode())
    assert match, "component root has no data-live-csrf-value"
    return match.group(1)


@pytest.fixture
def component2_state():
    return hydrator.dehydrate(factory.create("component2"))


@pytest.fixture
def token(client, component2_state):
    return csrf_token(client.get(component_url("component2", component2_state)))


def test_can_render_component_as_html_or_json(client):
    entity = Entity1Factory()
    date = datetime(2021, 3, 5, 9, 23)
    component = factory.create(
        "component1",
        {"prop1": entity, "prop2": date, "prop3": "value3", "prop4": "value4"},
    )
    dehydrated = hydrator.dehydrate(component)
    url = component_url("component1", dehydrated)

    response = client.get(url)
    assert response.status_code == 200
    assert "html" in response["Content-Type"]
    content = response.content.decode()
    assert f"Prop1: {entity.id}" in content
    assert "Prop2: 2021-03-05 9:23" in content
    assert "Prop3: value3" in content
    assert "Prop4: (none)" in content

    response = client.get(url, HTTP_ACCEPT=JSON_MEDIA_TYPE)
    assert response.status_code == 200
    assert response["Content-Type"] == JSON_MEDIA_TYPE
    payload = response.json()
    assert list(payload) == ["html", "data"]
    assert f"Prop1: {entity.id}" in payload["html"]
    assert "Prop2: 2021-03-05 9:23" in payload["html"]
    assert "Prop3: value3" in payload["html"]
    assert "Prop4: (none)" in payload["html"]
    assert list(payload["data"]) == ["prop1", "prop2", "prop3", "_checksum"]
    assert payload["data"]["prop1"] == entity.id
    assert payload["data"]["prop2"] == date.isoformat()
    assert payload["data"]["prop3"] == "value3"


def test_can_execute_component_action(client, component2_state):
    response = client.get(component_url("component2", component2_state))
    assert response.status_code == 200
    assert "html" in response["Content-Type"]
    assert "Count: 1" in response.content.decode()
    token = csrf_token(response)

    response = client.post(
        component_url("component2", component2_state, "increase"),
        HTTP_X_CSRF_TOKEN=token,
    )
    assert response.status_code == 200
    assert "html" in response["Content-Type"]
    assert "Count: 2" in response.content.decode()

    response = client.get(component_url("component2", component2_state), HTTP_ACCEPT=JSON_MEDIA_TYPE)
    assert response.status_code == 200
    assert response.json()["data"]["count"] == 1
    assert "Count: 1" in response.json()["html"]

    response = client.post(
        component_url("component2", component2_state, "increase"),
        HTTP_ACCEPT=JSON_MEDIA_TYPE,
        HTTP_X_CSRF_TOKEN=token,
    )
    assert response.status_code == 200
    assert response.json()["data"]["count"] == 2
    assert "Count: 2" in response.json()["html"]


def test_action_increments_once_per_call(client, component2_state, token):
    state = component2_state
    for expected in (2, 3, 4):
        response = client.post(
            component_url("component2", state, "increase"),
            HTTP_ACCEPT=JSON_MEDIA_TYPE,
            HTTP_X_CSRF_TOKEN=token,
        )
        assert response.status_code == 200
        state = response.json()["data"]
        assert state["count"] == expected
        assert f"Count: {expected}" in response.json()["html"]


def test_cannot_execute_component_action_for_get_request(client):
    response = client.get(component_url("component2", action="increase"))
    assert response.status_code == 405


def test_missing_csrf_token_for_component_action_fails(client):
    response = client.post(component_url("component2", action="increase"))
    assert response.status_code == 400


def test_invalid_csrf_token_for_component_action_fails(client):
    response = client.post(
        component_url("component2", action="increase"),
        HTTP_X_CSRF_TOKEN="invalid",
    )
    assert response.status_code == 400


def test_csrf_token_is_bound_to_user(client, django_user_model, component2_state, token):
    user = django_user_model.objects.create_user(username="u", password="p")
    client.force_login(user)
    response = client.post(
        component_url("component2", component2_state, "increase"),
        HTTP_X_CSRF_TOKEN=token,
    )
    assert response.status_code == 400

    user_token = csrf_token(client.get(component_url("component2", component2_state)))
    response = client.post(
        component_url("component2", component2_state, "increase"),
        HTTP_X_CSRF_TOKEN=user_token,
    )
    assert response.status_code == 200


def test_before_rerender_hook_only_executed_during_ajax(client, component2_state):
    response = client.get(reverse("render_template", args=["template1"]))
    assert response.status_code == 200
    assert "BeforeReRenderCalled: No" in response.content.decode()

    response = client.get(component_url("component2", component2_state))
    assert response.status_code == 200
    assert "BeforeReRenderCalled: Yes" in response.content.decode()


def test_can_redirect_from_component_action(client, component2_state, token):
    url = component_url("component2", component2_state, "redirect")

    response = client.post(url, HTTP_X_CSRF_TOKEN=token)
    assert response.status_code == 302
    assert response.url == "/"

    response = client.post(url, HTTP_ACCEPT="application/json", HTTP_X_CSRF_TOKEN=token)
    assert response.status_code == 200
    assert response.json() == {"redirect_url": "/"}

    response = client.post(url, HTTP_ACCEPT=JSON_MEDIA_TYPE, HTTP_X_CSRF_TOKEN=token)
    assert response.json() == {"redirect_url": "/"}


def test_redirect_can_be_followed(client, component2_state, token):
    response = client.post(
        component_url("component2", component2_state, "redirect"),
        HTTP_X_CSRF_TOKEN=token,
        follow=True,
    )
    assert response.status_code == 200
    assert response.redirect_chain == [("/", 302)]


def test_tampered_state_is_rejected(client, component2_state, token):
    tampered = dict(component2_state, count=99)
    assert client.get(component_url("component2", tampered)).status_code == 400

    response = client.post(
        component_url("component2", tampered, "increase"),
        HTTP_X_CSRF_TOKEN=token,
    )
    assert response.status_code == 400


def test_missing_checksum_is_rejected(client):
    assert client.get(component_url("component2", {"count": 1})).status_code == 400


def test_unknown_component_returns_404(client):
    assert client.get(component_url("nope", {})).status_code == 404


@pytest.mark.parametrize("action", ["unknown", "mark_rerendered", "render", "_hooks"])
def test_only_live_actions_can_be_called(client, component2_state, token, action):
    response = client.post(
        component_url("component2", component2_state, action),
        HTTP_X_CSRF_TOKEN=token,
    )
    assert response.status_code == 404


def test_writable_prop_may_change_client_side(client):
    state = hydrator.dehydrate(factory.create("counter", {"start": 10}))
    token = csrf_token(client.get(component_url("counter", state)))
    state["step"] = 5

    response = client.post(
        component_url("counter", state, "increase"),
        HTTP_ACCEPT=JSON_MEDIA_TYPE,
        HTTP_X_CSRF_TOKEN=token,
    )
    assert response.status_code == 200
    assert response.json()["data"]["count"] == 15
    assert response.json()["data"]["step"] == 5


def test_action_args_from_query_string(client):
    state = hydrator.dehydrate(factory.create("counter"))
    token = csrf_token(client.get(component_url("counter", state)))

    url = component_url("counter", state, "increase") + "&args=by%3D3"
    response = client.post(url, HTTP_ACCEPT=JSON_MEDIA_TYPE, HTTP_X_CSRF_TOKEN=token)
    assert response.status_code == 200
    assert response.json()["data"]["count"] == 3

    url = component_url("counter", state, "increase") + "&args=by%3Dthree"
    response = client.post(url, HTTP_X_CSRF_TOKEN=token)
    assert response.status_code == 400


def test_json_body_is_merged_over_query(client):
    state = hydrator.dehydrate(factory.create("counter", {"start": 2}))
    token = csrf_token(client.get(component_url("counter", state)))

    response = client.post(
        component_url("counter", action="increase"),
        data=json.dumps(dict(state, step=4, args={"by": 0})),
        content_type="application/json",
        HTTP_ACCEPT=JSON_MEDIA_TYPE,
        HTTP_X_CSRF_TOKEN=token,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["count"] == 6
    assert data["step"] == 4


def test_malformed_json_body_is_rejected(client):
    state = hydrator.dehydrate(factory.create("counter"))
    token = csrf_token(client.get(component_url("counter", state)))
    response = client.post(
        component_url("counter", action="increase"),
        data="{not json",
        content_type="application/json",
        HTTP_X_CSRF_TOKEN=token,
    )
    assert response.status_code == 400


@pytest.fixture
def csrf_free_counter():
    class CsrfFreeCounter(Counter):
        template_name = "components/counter.html"
        csrf = False

    factory.register("csrf_free_counter", CsrfFreeCounter)
    yield CsrfFreeCounter
    factory.unregister("csrf_free_counter")


def test_component_can_opt_out_of_csrf(client, csrf_free_counter):
    state = hydrator.dehydrate(factory.create("csrf_free_counter"))
    response = client.get(component_url("csrf_free_counter", state))
    assert "data-live-csrf-value" not in response.content.decode()

    response = client.post(component_url("csrf_free_counter", state, "increase"))
    assert response.status_code == 200
    assert "Count: 1" in response.content.decode()


def test_signals_are_sent_on_live_requests(client, component2_state, token):
    rerendered, performed = [], []

    def on_rerender(sender, component, request, **kwargs):
        rerendered.append(component.count)

    def on_action(sender, component, request, action, response, **kwargs):
        performed.append((action, response))

    component_pre_rerender.connect(on_rerender)
    component_action_performed.connect(on_action)
    try:
        client.get(reverse("render_template", args=["template1"]))
        assert rerendered == []

        client.post(
            component_url("component2", component2_state, "increase"),
            HTTP_X_CSRF_TOKEN=token,
        )
    finally:
        component_pre_rerender.disconnect(on_rerender)
        component_action_performed.disconnect(on_action)

    assert rerendered == [2]
    assert performed == [("increase", None)]


def test_rejected_action_is_logged(client, caplog):
    with caplog.at_level("WARNING", logger="live_component.views"):
        client.post(component_url("component2", action="increase"))
    assert "Rejected live action component2.increase" in caplog.text


@pytest.mark.parametrize("prop1", [str(2**70), "12345"])
def test_forged_state_is_rejected_before_any_query(client, django_assert_num_queries, prop1):
    forged = {"prop1": prop1, "prop2": "", "prop3": "x", "_checksum": "forged"}
    with django_assert_num_queries(0):
        response = client.get(component_url("component1", forged))
    assert response.status_code == 400
