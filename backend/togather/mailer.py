"""Transactional email through Resend."""

from typing import Any, Dict, Protocol

import resend


class Mailer(Protocol):
  def send(self, sender: str, to: str, subject: str, html: str) -> Dict[str, Any]:  # pragma: no cover - Protocol
    ...


class ResendMailer:
  """Sends one HTML email per call with the Resend SDK.

  The SDK keeps its API key at module level, so it is set once here when the
  process-wide mailer is created.
  """

  def __init__(self, api_key: str):
    resend.api_key = api_key

  def send(self, sender: str, to: str, subject: str, html: str) -> Dict[str, Any]:
    params: resend.Emails.SendParams = {
      'from': sender,
      'to': to,
      'subject': subject,
      'html': html,
    }
    return resend.Emails.send(params)
