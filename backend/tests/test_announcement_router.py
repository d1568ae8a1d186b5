from togather.config import get_settings

from .conftest import AUTHOR_ID


def post_announcement(client, headers, path='/api/announcements', files=None, **fields):
  data = {'title': 'T', 'content': '<p>hi</p>'}
  data.update(fields)
  return client.post(path, data=data, files=files, headers=headers)


def test_healthcheck(client):
  resp = client.get('/healthz')

  assert resp.status_code == 200
  assert resp.json() == {'status': 'ok'}


def test_create_then_list_shows_newest_public_first(client, supabase, auth_headers):
  supabase.add_row('announcement', {'title': 'Old', 'content': 'x', 'visibility': 'public', 'group_id': None, 'user_id': AUTHOR_ID})
  supabase.add_row('announcement', {'title': 'Secret', 'content': 'x', 'visibility': 'private', 'group_id': 'g1', 'user_id': AUTHOR_ID})

  resp = post_announcement(client, auth_headers)

  assert resp.status_code == 201
  body = resp.json()
  assert body['success'] is True
  assert body['message'] == 'Announcement created successfully'
  assert body['data']['visibility'] == 'public'
  assert body['data']['title'] == 'T'

  listing = client.get('/api/announcements')

  assert listing.status_code == 200
  items = listing.json()['data']
  assert [item['title'] for item in items] == ['T', 'Old']
  assert items[0]['id'] == body['data']['id']
  assert items[0]['users'] == {'name': 'Author', 'email': 'author@example.com'}
  assert items[0]['announcement_files'] == []


def test_listing_never_returns_private_rows(client, supabase):
  supabase.add_row('announcement', {'title': 'Secret', 'content': 'x', 'visibility': 'private', 'group_id': 'g1', 'user_id': AUTHOR_ID})

  resp = client.get('/api/announcements')

  assert resp.status_code == 200
  assert resp.json() == {'success': True, 'data': []}


def test_listing_includes_attachments(client, supabase, auth_headers):
  resp = post_announcement(
    client,
    auth_headers,
    files=[
      ('files', ('poster.png', b'\x89PNG', 'image/png')),
      ('files', ('agenda.pdf', b'%PDF', 'application/pdf')),
    ],
  )
  assert resp.status_code == 201

  items = client.get('/api/announcements').json()['data']

  assert len(items[0]['announcement_files']) == 2
  assert {f['type'] for f in items[0]['announcement_files']} == {'image/png', 'application/pdf'}


def test_group_id_field_makes_announcement_private(client, auth_headers):
  resp = post_announcement(client, auth_headers, groupId='group-9')

  assert resp.status_code == 201
  assert resp.json()['data']['visibility'] == 'private'
  assert resp.json()['data']['group_id'] == 'group-9'


def test_create_requires_authentication(client, supabase):
  resp = post_announcement(client, {})

  assert resp.status_code == 401
  assert resp.json()['success'] is False
  assert supabase.rows('announcement') == []


def test_create_rejects_unknown_token(client):
  resp = post_announcement(client, {'Authorization': 'Bearer nope'})

  assert resp.status_code == 401
  assert resp.json()['message'] == 'Invalid or expired token'


def test_missing_title_is_a_validation_error(client, auth_headers):
  resp = client.post('/api/announcements', data={'content': 'x'}, headers=auth_headers)

  assert resp.status_code == 422
  assert resp.json()['success'] is False


def test_persistence_failure_returns_500_with_message(client, supabase, auth_headers):
  supabase.fail_on.add(('announcement', 'insert'))

  resp = post_announcement(client, auth_headers)

  assert resp.status_code == 500
  body = resp.json()
  assert body['success'] is False
  assert body['message'] == 'Failed to create announcement'
  assert 'Failed to insert announcement' in body['error']


def test_upload_failure_returns_500_and_creates_nothing(client, supabase, auth_headers):
  supabase.storage.fail_names.add('poster')

  resp = post_announcement(client, auth_headers, files=[('files', ('poster.png', b'x', 'image/png'))])

  assert resp.status_code == 500
  assert 'Error uploading file' in resp.json()['error']
  assert supabase.rows('announcement') == []


def test_email_failure_does_not_change_response(client, supabase, mailer, auth_headers):
  supabase.add_user('member-1', 'one@example.com')
  supabase.add_user('member-2', 'two@example.com')
  mailer.fail_for.add('one@example.com')

  resp = post_announcement(client, auth_headers)

  assert resp.status_code == 201
  assert mailer.recipients == ['two@example.com']


def test_oversized_attachment_is_rejected(client, supabase, auth_headers):
  small = get_settings().model_copy(update={'max_upload_bytes': 4})
  client.app.dependency_overrides[get_settings] = lambda: small

  resp = post_announcement(client, auth_headers, files=[('files', ('big.png', b'0123456789', 'image/png'))])

  assert resp.status_code == 413
  assert resp.json()['success'] is False
  assert supabase.storage.objects == {}


def test_group_post_requires_membership(client, supabase, auth_headers):
  resp = post_announcement(client, auth_headers, path='/api/announcements/group/group-1')

  assert resp.status_code == 403
  assert resp.json() == {
    'success': False,
    'message': 'You do not have permission to post announcements in this group',
  }
  assert supabase.rows('announcement') == []


def test_group_post_by_member_is_private(client, supabase, mailer, auth_headers):
  supabase.add_row('group_members', {'user_id': AUTHOR_ID, 'group_id': 'group-1'})
  supabase.add_user('member-1', 'one@example.com', groups=['group-1'])
  supabase.add_user('outsider', 'outsider@example.com')

  resp = post_announcement(client, auth_headers, path='/api/announcements/group/group-1')

  assert resp.status_code == 201
  body = resp.json()
  assert body['message'] == 'Group announcement created successfully'
  assert body['data']['visibility'] == 'private'
  assert body['data']['group_id'] == 'group-1'
  assert mailer.recipients == ['one@example.com']


def test_group_membership_lookup_failure_is_forbidden(client, supabase, auth_headers):
  supabase.fail_on.add(('group_members', 'select'))

  resp = post_announcement(client, auth_headers, path='/api/announcements/group/group-1')

  assert resp.status_code == 403
  assert supabase.rows('announcement') == []


def test_listing_failure_returns_500(client, supabase):
  supabase.fail_on.add(('announcement', 'select'))

  resp = client.get('/api/announcements')

  assert resp.status_code == 500
  assert resp.json()['message'] == 'Failed to fetch announcements'


def test_long_title_is_accepted(client, supabase, auth_headers):
  resp = post_announcement(client, auth_headers, title='A' * 201)

  assert resp.status_code == 201
  assert supabase.rows('announcement')[0]['title'] == 'A' * 201


def test_title_is_stored_as_submitted(client, supabase, mailer, auth_headers):
  supabase.add_user('member-1', 'one@example.com')

  resp = post_announcement(client, auth_headers, title='  Feast  ')

  assert resp.status_code == 201
  assert supabase.rows('announcement')[0]['title'] == '  Feast  '
  assert mailer.sent[0]['subject'] == '  Feast  '


def test_blank_title_is_rejected(client, supabase, auth_headers):
  resp = post_announcement(client, auth_headers, title='   ')

  assert resp.status_code == 422
  assert supabase.rows('announcement') == []


def test_content_is_optional(client, supabase, auth_headers):
  resp = client.post('/api/announcements', data={'title': 'No body'}, headers=auth_headers)

  assert resp.status_code == 201
  assert supabase.rows('announcement')[0]['content'] == ''


def test_listing_tolerates_rows_with_null_content(client, supabase):
  supabase.add_row('announcement', {'title': 'Old', 'content': None, 'visibility': 'public', 'group_id': None, 'user_id': AUTHOR_ID})
  old = supabase.rows('announcement')[-1]
  supabase.add_row('announcement_files', {'announcement_id': old['id'], 'url': 'announcement/x-1.png', 'name': None, 'type': None})

  resp = client.get('/api/announcements')

  assert resp.status_code == 200
  items = resp.json()['data']
  assert items[0]['title'] == 'Old'
  assert items[0]['content'] is None
  assert items[0]['announcement_files'][0]['name'] is None
