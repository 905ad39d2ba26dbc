"""Multi-step orchestration built from backend calls, polling and sessions."""

import shlex

from siteops.api.outcome import describe, is_success, payload_of
from siteops.backends import pressable, wpcom
from siteops.errors import ConfigError
from siteops.polling import (
    CODE_DEPLOYMENT_DELAY,
    SITE_STATE_DELAY,
    SSH_READY_DELAY,
    LogProgress,
    TimedOut,
    exit_state,
    reach_state,
    wait_for,
)
from siteops.remote.acquire import PressableSessionAcquirer


# ── Site state ────────────────────────────────────────────────────


def wait_until_wpcom_site_state(ctx, site_id, state, **ceilings):
    """Wait until the agency site's Atomic state is *state*.

    Returns:
        The agency site record, or ``TimedOut`` when a ceiling was hit.
    """
    agency_id = ctx.settings.agency_id
    if agency_id is None:
        raise ConfigError("agency_id is required to look up WordPress.com agency sites.")

    ctx.logger.info(f"Waiting for WordPress.com site {site_id} to reach the {state} state.")
    progress = LogProgress(f"waiting for {state}", ctx.logger)
    result = wait_for(
        lambda: wpcom.get_agency_site(ctx, agency_id, site_id),
        reach_state(state, lambda site: site["features"]["wpcom_atomic"]["state"]),
        SITE_STATE_DELAY,
        progress,
        **ceilings,
    )
    progress.finish()
    return result


def wait_until_pressable_site_state(ctx, site_id, state, **ceilings):
    """Wait until the Pressable site leaves *state* (e.g. ``deploying``).

    Returns:
        The site record, or ``TimedOut`` when a ceiling was hit.
    """
    ctx.logger.info(f"Waiting for Pressable site {site_id} to exit the {state} state.")
    progress = LogProgress(f"waiting to exit {state}", ctx.logger)
    result = wait_for(
        lambda: payload_of(pressable.get_site(ctx, site_id)),
        exit_state(state, lambda site: site["state"]),
        SITE_STATE_DELAY,
        progress,
        **ceilings,
    )
    progress.finish()
    return result


# ── Code deployments ──────────────────────────────────────────────


def _current_run(deployment):
    return deployment.get("current_deployment_run") or {}


def wait_until_code_deployment_run_state(ctx, site_id, deployment_id, status, **ceilings):
    """Wait until the site's first code deployment runs *deployment_id* with *status*.

    Returns:
        The code deployment record, or ``TimedOut``.
    """

    def _first_deployment():
        deployments = payload_of(wpcom.get_code_deployments(ctx, site_id))
        if not isinstance(deployments, list) or not deployments:
            return None
        return deployments[0]

    def _done(deployment):
        run = _current_run(deployment)
        return str(run.get("code_deployment_id")) == str(deployment_id) and run.get("status") == status

    ctx.logger.info(f"Waiting for code deployment {deployment_id} on site {site_id} to reach {status}.")
    progress = LogProgress(f"waiting for deployment {status}", ctx.logger)
    result = wait_for(_first_deployment, _done, CODE_DEPLOYMENT_DELAY, progress, **ceilings)
    progress.finish()
    return result


def deploy_code(ctx, site_id, deployment_id, **ceilings):
    """Trigger a run of a code deployment and wait for it to succeed.

    Returns:
        The deployment record, ``None`` if the run could not be started, or
        ``TimedOut``.
    """
    outcome = wpcom.create_code_deployment_run(ctx, site_id, deployment_id)
    if ctx.executor.dry_run:
        ctx.logger.info(f"[dry-run] Would wait for code deployment {deployment_id} on site {site_id}.")
        return None
    if not is_success(outcome):
        ctx.logger.error(f"Could not start code deployment {deployment_id} on site {site_id}: {describe(outcome)}")
        return None
    ctx.emit("code_deployment_started", site_id=site_id, deployment_id=deployment_id)
    return wait_until_code_deployment_run_state(ctx, site_id, deployment_id, "success", **ceilings)


# ── Remote shell ──────────────────────────────────────────────────


def wait_on_site_ssh(ctx, acquirer, site_id, max_attempts=None):
    """Poll until a ready shell session can be acquired.

    Transient failures (connect, auth, SFTP-only server) are retried every
    few seconds. A credentials failure stops the wait.

    Returns:
        The open ``ShellSession``, ``None`` on a permanent failure, or
        ``TimedOut``. The caller owns the returned session.
    """
    ctx.logger.info(f"Waiting for {site_id} to accept SSH connections.")
    progress = LogProgress("waiting for SSH", ctx.logger)
    result = wait_for(
        lambda: acquirer.acquire(site_id, shell=True),
        lambda attempt: attempt.ok or not attempt.failure.transient,
        SSH_READY_DELAY,
        progress,
        max_attempts=max_attempts,
    )
    progress.finish()
    if isinstance(result, TimedOut):
        return result
    if not result.ok:
        ctx.logger.error(f"Giving up on SSH for {site_id}: {result.failure.value} ({result.detail})")
        return None
    return result.session


def run_wp_cli_command(ctx, acquirer, site_id, command):
    """Run ``wp <command>`` on the site.

    Args:
        command: WP-CLI arguments, as a string or a list of arguments.

    Returns:
        ``(exit_status, stdout)``, or ``None`` if no session could be opened.
    """
    if not isinstance(command, str):
        command = shlex.join(command)
    full_command = f"wp {command}"
    with acquirer.shell(site_id) as session:
        if session is None:
            ctx.logger.error(f"Could not open an SSH session to {site_id}.")
            return None
        ctx.logger.info(f"Running `{full_command}` on {site_id}")
        status, stdout, _ = session.run(full_command, log_output=True)
    return status, stdout


# ── Site creation ─────────────────────────────────────────────────


def create_pressable_site(ctx, name, datacenter, acquirer=None, max_ssh_attempts=None):
    """Create a Pressable site and wait until it is deployed and reachable over SSH.

    Emits ``site_created`` as soon as the backend accepts the site.

    Returns:
        The site record, or ``None`` on failure. In dry-run mode nothing is
        created and ``None`` is returned.
    """
    outcome = pressable.create_site(ctx, name, datacenter)
    site = payload_of(outcome)
    if ctx.executor.dry_run:
        ctx.logger.info(f"[dry-run] Would create Pressable site {name} in {datacenter}.")
        return None
    if not isinstance(site, dict) or "id" not in site:
        ctx.logger.error(f"Failed to create Pressable site {name}: {describe(outcome)}")
        return None

    site_id = site["id"]
    ctx.logger.info(f"Created Pressable site {name} (ID {site_id}).")
    ctx.emit("site_created", backend="pressable", site_id=site_id, name=name)

    site = wait_until_pressable_site_state(ctx, site_id, "deploying")
    if isinstance(site, TimedOut):
        return None

    acquirer = acquirer or PressableSessionAcquirer(ctx)
    session = wait_on_site_ssh(ctx, acquirer, site_id, max_attempts=max_ssh_attempts)
    if session is None or isinstance(session, TimedOut):
        ctx.logger.error(f"Site {site_id} was created but never became reachable over SSH.")
        return None
    session.close()
    ctx.logger.info(f"Site {site_id} is ready.")
    return site
