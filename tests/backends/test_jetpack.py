"""Tests for siteops.backends.jetpack."""

import json

import httpx

from siteops.backends import jetpack


def test_get_site_modules_batch(ctx, fake_api):
    fake_api.add("POST", "jetpack/v1/modules/batch", {"1": {"stats": {"activated": True}}, "2": {"errors": "x"}})
    result = jetpack.get_site_modules_batch(ctx, [1, 2])
    assert result.results == {"1": {"stats": {"activated": True}}}
    assert set(result.errors) == {"2"}


def test_update_site_modules_settings_sends_json_string(ctx, fake_api):
    fake_api.add("POST", "jetpack/v1/modules/1", {"data": {"code": "success"}})
    assert jetpack.update_site_modules_settings(ctx, 1, {"stats": True}) is True
    body = fake_api.requests[0]["body"]
    assert json.loads(body["settings"]) == {"stats": True}


def test_update_site_modules_settings_unsuccessful(ctx, fake_api):
    fake_api.add("POST", "jetpack/v1/modules/1", {"data": {"code": "failed"}})
    assert jetpack.update_site_modules_settings(ctx, 1, {}) is False
    fake_api.add("POST", "jetpack/v1/modules/1", httpx.Response(500))
    assert jetpack.update_site_modules_settings(ctx, 1, {}) is None
