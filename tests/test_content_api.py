from models import Activity


def test_scenario_create_hero_item_then_list_section(admin_client):
    rv = admin_client.post('/api/content', json={
        'section': 'hero',
        'metadata': {'name': 'headline'},
        'content': '<h1>Welcome</h1>',
    })
    assert rv.status_code == 200
    body = rv.get_json()
    assert body['success'] is True
    new_id = body['id']

    rv = admin_client.get('/api/content?section=hero')
    assert rv.status_code == 200
    assert new_id in [i['id'] for i in rv.get_json()]


def test_scenario_delete_unknown_id_is_404(admin_client):
    rv = admin_client.delete('/api/content?id=unknown-id')
    assert rv.status_code == 404
    assert rv.get_json() == {'error': 'Content not found'}


def test_scenario_deactivate_hides_from_section_but_not_from_id_lookup(admin_client, client):
    created = admin_client.post('/api/content', json={'section': 'about', 'content': 'Our story'}).get_json()
    item_id = created['id']
    # Warm the cache so the update has something to invalidate
    assert item_id in [i['id'] for i in client.get('/api/content?section=about').get_json()]

    rv = admin_client.put(f'/api/content?id={item_id}', json={'isActive': False})
    assert rv.status_code == 200

    listed = client.get('/api/content?section=about').get_json()
    assert item_id not in [i['id'] for i in listed]

    single = client.get(f'/api/content?id={item_id}')
    assert single.status_code == 200
    assert single.get_json()['isActive'] is False


def test_null_is_active_is_rejected(admin_client, client):
    item_id = admin_client.post('/api/content', json={'section': 'about', 'content': 'Our story'}).get_json()['id']

    rv = admin_client.put(f'/api/content?id={item_id}', json={'isActive': None})
    assert rv.status_code == 400
    assert rv.get_json() == {'error': 'isActive must be true or false'}
    assert client.get(f'/api/content?id={item_id}').get_json()['isActive'] is True


def test_get_requires_section_or_id(client):
    rv = client.get('/api/content')
    assert rv.status_code == 400
    assert rv.get_json() == {'error': 'Section parameter is required'}


def test_get_unknown_id_is_404(client):
    rv = client.get('/api/content?id=nope')
    assert rv.status_code == 404
    assert rv.get_json()['error'] == 'Content not found'


def test_mutations_require_login(client):
    assert client.post('/api/content', json={'section': 'hero', 'content': 'x'}).status_code == 401
    assert client.put('/api/content?id=x', json={}).status_code == 401
    assert client.delete('/api/content?id=x').status_code == 401
    rv = client.put('/api/content/reorder', json={'items': []})
    assert rv.status_code == 401
    assert rv.get_json() == {'error': 'Authentication required'}


def test_mutations_require_admin_role(viewer_client):
    rv = viewer_client.post('/api/content', json={'section': 'hero', 'content': 'x'})
    assert rv.status_code == 403
    assert rv.get_json() == {'error': 'Admin privileges required'}


def test_create_validation_errors(admin_client):
    rv = admin_client.post('/api/content', json={'content': 'x'})
    assert rv.status_code == 400
    assert rv.get_json() == {'error': 'Section parameter is required'}

    rv = admin_client.post('/api/content', data='not json', content_type='text/plain')
    assert rv.status_code == 400


def test_update_missing_id_parameter(admin_client):
    rv = admin_client.put('/api/content', json={'content': 'x'})
    assert rv.status_code == 400
    assert rv.get_json() == {'error': 'ID parameter is required'}


def test_reorder_endpoint_is_all_or_nothing(admin_client, client):
    a = admin_client.post('/api/content', json={'section': 'features', 'content': 'a'}).get_json()['id']
    b = admin_client.post('/api/content', json={'section': 'features', 'content': 'b'}).get_json()['id']

    rv = admin_client.put('/api/content/reorder', json={'items': [{'id': b, 'order': 0}, {'id': 'ghost', 'order': 1}]})
    assert rv.status_code == 404
    assert [i['id'] for i in client.get('/api/content?section=features').get_json()] == [a, b]

    rv = admin_client.put('/api/content/reorder', json=[{'id': b, 'order': 0}, {'id': a, 'order': 1}])
    assert rv.status_code == 200
    assert rv.get_json() == {'success': True, 'updated': 2}
    assert [i['id'] for i in client.get('/api/content?section=features').get_json()] == [b, a]


def test_include_inactive_only_for_admin(admin_client, client):
    item_id = admin_client.post('/api/content', json={'section': 'donate', 'content': 'x', 'isActive': False}).get_json()['id']

    assert client.get('/api/content?section=donate&includeInactive=true').get_json() == []
    listed = admin_client.get('/api/content?section=donate&includeInactive=true').get_json()
    assert [i['id'] for i in listed] == [item_id]


def test_subsection_filter(admin_client, client):
    admin_client.post('/api/content', json={'section': 'about', 'content': 'general'})
    board = admin_client.post('/api/content', json={'section': 'about', 'subsection': 'board', 'content': 'b'}).get_json()['id']

    listed = client.get('/api/content?section=about&subsection=board').get_json()
    assert [i['id'] for i in listed] == [board]


def test_admin_edits_are_logged(app, admin_client):
    admin_client.post('/api/content', json={'section': 'hero', 'metadata': {'name': 'headline'}, 'content': 'x'})

    with app.app_context():
        activity = Activity.query.one()
        assert activity.action == 'Created'
        assert activity.item == 'headline'
        assert activity.user == 'admin'
        assert activity.section == 'hero'
