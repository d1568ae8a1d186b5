from typing import Callable, Iterable

from jinja2 import Environment, PackageLoader, select_autoescape

from ..schemas import UploadedFile

ANNOUNCEMENT_TEMPLATE = 'announcement_email.html'

_env = Environment(
  loader=PackageLoader('togather', 'templates'),
  autoescape=select_autoescape(['html', 'xml']),
  trim_blocks=True,
  lstrip_blocks=True,
)


def render_announcement_email(
  title: str,
  content: str,
  files: Iterable[UploadedFile],
  public_url: Callable[[str], str],
  footer: str,
) -> str:
  """Build the HTML body sent to every recipient.

  ``title`` and ``content`` are marked safe in the template: announcements are
  written by authenticated organizers and the content is already HTML. Only
  image attachments are inlined.
  """
  images = [
    {'src': public_url(file.url), 'name': file.name}
    for file in files
    if file.is_image
  ]
  template = _env.get_template(ANNOUNCEMENT_TEMPLATE)
  return template.render(title=title, content=content, images=images, footer=footer)
