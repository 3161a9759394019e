import base64
import hashlib
import hmac
import io
from datetime import datetime, timezone
from urllib.parse import parse_qs, urlsplit

import pytest

from s3item_async import Config, Item, SSLOptions
from s3item_async.error import FatalError, ValidationError

from .conftest import FROZEN_DATE, error_response, fake_response, \
    redirect_response

ACCESS_KEY = 'AKID'
SECRET_KEY = 'SECRET'
URL = 'https://bucket.s3.amazonaws.com:443/the-key'
LONG_BUCKET = 'a-very-long-bucket-name-that-is-not-a-valid-dns-label-because-of-size'


def expected_authorization(string_to_sign):
    signature = base64.b64encode(
        hmac.new(SECRET_KEY.encode(), string_to_sign.encode(),
                 hashlib.sha1).digest()
    ).decode()
    return 'AWS ' + ACCESS_KEY + ':' + signature


def make_item(session=None, **kwargs):
    return Item('bucket', 'the-key', aws_access_key_id=ACCESS_KEY,
                aws_secret_access_key=SECRET_KEY, session=session, **kwargs)


def test_urls():
    assert make_item().url == URL
    item = Item(LONG_BUCKET, 'the-key', server='127.0.0.1')
    assert item.url == 'https://127.0.0.1:443/' + LONG_BUCKET + '/the-key'


def test_url_follows_config():
    config = Config(server='storage.example.com', protocol='http', port=8080)
    assert Item('bucket', 'k', config=config).url == \
        'http://bucket.storage.example.com:8080/k'
    assert Item('bucket', 'k', protocol='https', port=8443, config=config).url \
        == 'https://bucket.storage.example.com:8443/k'


def test_anonymous_item():
    item = Item('bucket', 'the-key')
    assert item.credentials is None
    assert 'Authorization' not in item.sign_headers('GET')
    assert item.expiring_url(1267092000) == URL


def test_partial_credentials():
    with pytest.raises(ValidationError):
        Item('bucket', 'the-key', aws_access_key_id=ACCESS_KEY)


def test_sign_headers(frozen_time):
    headers = make_item().sign_headers('GET', {'x-amz-meta-a': 'b'})
    assert headers['Date'] == FROZEN_DATE
    assert headers['Authorization'] == expected_authorization(
        'GET\n\n\n' + FROZEN_DATE + '\nx-amz-meta-a:b\n/bucket/the-key'
    )


def test_path_style_signs_same_resource(frozen_time):
    item = Item('bucket', 'the-key', aws_access_key_id=ACCESS_KEY,
                aws_secret_access_key=SECRET_KEY, server='localhost')
    assert item.sign_headers('GET')['Authorization'] == \
        make_item().sign_headers('GET')['Authorization']


def test_expiring_url():
    url = make_item().expiring_url(1267092000)
    parts = urlsplit(url)
    assert url.startswith(URL + '?')
    assert parse_qs(parts.query) == {
        'AWSAccessKeyId': [ACCESS_KEY],
        'Expires': ['1267092000'],
        'Signature': [expected_authorization(
            'GET\n\n\n1267092000\n/bucket/the-key').split(':', 1)[1]],
    }


def test_ssl_overrides_merge_with_config():
    config = Config(ssl=SSLOptions(verify_peer=True,
                                   cert_chain_file='/etc/ssl/ca.pem'))
    item = Item('bucket', 'the-key', ssl={'verify_peer': False}, config=config)
    assert item.ssl == SSLOptions(verify_peer=False,
                                  cert_chain_file='/etc/ssl/ca.pem')

    request = item.request('GET', ssl={'cert_chain_file': '/tmp/ca.pem'})
    assert request.ssl == SSLOptions(verify_peer=False,
                                     cert_chain_file='/tmp/ca.pem')
    assert item.ssl.cert_chain_file == '/etc/ssl/ca.pem'

    assert Item('bucket', 'k', config=config).ssl == config.ssl


def test_request_options_follow_item_and_config():
    config = Config(retry_count=2, timeout=30)
    item = Item('bucket', 'the-key', config=config)
    request = item.request('get')
    assert request.http_method == 'GET'
    assert request.retry_count == 2
    assert request.timeout == 30
    assert request.item is item

    request = Item('bucket', 'the-key', retry_count=0, timeout=5,
                   config=config).request('GET')
    assert request.retry_count == 0
    assert request.timeout == 5

    assert item.request('GET', retry_count=1, timeout=1).retry_count == 1


def test_trace_on_requires_stream():
    with pytest.raises(ValueError):
        make_item().trace_on(None)


@pytest.mark.asyncio
async def test_get(frozen_time, mock_client_session):
    mock_client_session.add_route('GET', URL, fake_response(body=b'hello'))
    result = await make_item(mock_client_session).get()
    assert result.response.body == b'hello'
    call = mock_client_session.calls[0]
    assert call.headers['Authorization'] == expected_authorization(
        'GET\n\n\n' + FROZEN_DATE + '\n/bucket/the-key'
    )


@pytest.mark.asyncio
async def test_anonymous_get_is_unsigned(mock_client_session):
    mock_client_session.add_route('GET', URL, fake_response())
    await Item('bucket', 'the-key', session=mock_client_session).get()
    assert 'Authorization' not in mock_client_session.calls[0].headers


@pytest.mark.asyncio
async def test_put_signs_acl_and_content_type(frozen_time, mock_client_session):
    mock_client_session.add_route('PUT', URL, fake_response(body=b''))
    await make_item(mock_client_session, permissions='private').put(
        b'hello', headers={'Content-Type': 'text/plain',
                           'x-amz-meta-author': 'me'},
    )
    call = mock_client_session.calls[0]
    assert call.data == b'hello'
    assert call.headers['x-amz-acl'] == 'private'
    assert call.headers['Authorization'] == expected_authorization(
        'PUT\n\ntext/plain\n' + FROZEN_DATE +
        '\nx-amz-acl:private\nx-amz-meta-author:me\n/bucket/the-key'
    )


@pytest.mark.asyncio
async def test_put_without_permissions_sends_no_acl(frozen_time,
                                                     mock_client_session):
    mock_client_session.add_route('PUT', URL, fake_response())
    item = make_item(mock_client_session)
    assert item.permissions is None
    await item.put(b'x')
    call = mock_client_session.calls[0]
    assert 'x-amz-acl' not in call.headers
    assert call.headers['Authorization'] == expected_authorization(
        'PUT\n\n\n' + FROZEN_DATE + '\n/bucket/the-key'
    )


@pytest.mark.asyncio
async def test_put_with_other_permissions(mock_client_session):
    mock_client_session.add_route('PUT', URL, fake_response())
    mock_client_session.add_route(
        'PUT', 'https://bucket.s3.amazonaws.com:443/other', fake_response(),
    )
    await make_item(mock_client_session, permissions='public-read').put(b'x')
    await Item('bucket', 'other', permissions=None,
               session=mock_client_session).put(b'x')
    first, second = mock_client_session.calls
    assert first.headers['x-amz-acl'] == 'public-read'
    assert 'x-amz-acl' not in second.headers


def known_item(session, **kwargs):
    return Item('bucket', 'the-key', aws_access_key_id='abc',
                aws_secret_access_key='123', session=session, **kwargs)


@pytest.mark.asyncio
async def test_get_known_signature(mocker, mock_client_session):
    mocker.patch('s3item_async.time.utcnow',
                 return_value=datetime(2010, 2, 25, 12, 6, 33,
                                       tzinfo=timezone.utc))
    mock_client_session.add_route('GET', URL, fake_response())
    await known_item(mock_client_session).get()
    call = mock_client_session.calls[0]
    assert call.headers['Date'] == 'Thu, 25 Feb 2010 12:06:33 GMT'
    assert call.headers['Authorization'] == \
        'AWS abc:3OEcVbE//maUUmqh3A5ETEcr9TE='


@pytest.mark.asyncio
@pytest.mark.parametrize('method, kwargs, options, authorization', [
    ('DELETE', {}, {}, 'AWS abc:nvkrlq4wor1qbFXZh6rHnAbiRjk='),
    ('PUT', {}, {'data': b'content'},
     'AWS abc:lZMKxGDKcQ1PH8yjbpyN7o2sPWg='),
    ('PUT', {'permissions': 'public-read'}, {'data': b'content'},
     'AWS abc:cqkfX+nC7WIkYD+yWaUFuoRuePA='),
    ('PUT', {'permissions': 'public-read'}, {
        'data': b'content',
        'headers': {'Expires': 'Fri, 16 Nov 2018 22:09:29 GMT',
                    'Cache-Control': 'max-age=252460800',
                    'x-amz-meta-abc': 'ABC'},
    }, 'AWS abc:wrPkGKrlwH2AtNzBVS80vU73TDc='),
])
async def test_known_signatures(frozen_time, mock_client_session, method,
                                kwargs, options, authorization):
    mock_client_session.add_route(method, URL, fake_response())
    item = known_item(mock_client_session, **kwargs)
    if method == 'PUT':
        await item.put(**options)
    else:
        await item.delete(**options)
    call = mock_client_session.calls[0]
    assert call.headers['Date'] == FROZEN_DATE
    assert call.headers['Authorization'] == authorization


@pytest.mark.asyncio
async def test_put_redirect_keeps_known_signature(frozen_time,
                                                  mock_client_session):
    target = 'https://bucket.s3-external-3.amazonaws.com/the-key'
    mock_client_session.add_route('PUT', URL, redirect_response(target))
    mock_client_session.add_route('PUT', target, fake_response(body=b'Thanks!'))
    result = await known_item(mock_client_session).put(b'content')
    assert result.response.body == b'Thanks!'
    for call in mock_client_session.calls:
        assert call.headers['Authorization'] == \
            'AWS abc:lZMKxGDKcQ1PH8yjbpyN7o2sPWg='


@pytest.mark.asyncio
@pytest.mark.parametrize('headers', [
    {'expires': FROZEN_DATE},
    {'cache_control': 'max-age=60'},
])
async def test_put_rejects_invalid_headers(headers, mock_client_session):
    with pytest.raises(ValidationError):
        await make_item(mock_client_session).put(b'x', headers=headers)
    assert mock_client_session.count() == 0


@pytest.mark.asyncio
async def test_put_file(tmp_path, mock_client_session):
    path = tmp_path / 'upload.txt'
    path.write_bytes(b'file-content')
    mock_client_session.add_route('PUT', URL, fake_response())
    await make_item(mock_client_session).put(
        file=str(path), headers={'Content-Type': 'text/plain'},
    )
    call = mock_client_session.calls[0]
    assert call.data == b'file-content'
    assert call.headers['Content-Length'] == '12'


@pytest.mark.asyncio
async def test_head_and_delete(mock_client_session):
    mock_client_session.add_route(
        'HEAD', URL,
        fake_response(body=b'', response_headers={'Content-Length': '5'}),
    )
    mock_client_session.add_route('DELETE', URL, fake_response(body=b''))
    item = make_item()
    item.set_session(mock_client_session)

    result = await item.head()
    assert result.response.content_length == 5
    assert (await item.delete()).ok
    assert mock_client_session.count('DELETE', URL) == 1


@pytest.mark.asyncio
async def test_get_retry_count_option(mock_client_session):
    mock_client_session.add_route('GET', URL, error_response(400))
    errors = []
    result = await make_item(mock_client_session).get(
        retry_count=1, on_error=errors.append,
    )
    assert not result.ok
    assert mock_client_session.count() == 2
    assert errors == [result.error]


@pytest.mark.asyncio
async def test_get_without_error_handler_raises(mock_client_session):
    mock_client_session.add_route('GET', URL, error_response(400))
    with pytest.raises(FatalError):
        await make_item(mock_client_session).get()
    assert mock_client_session.count() == 5


@pytest.mark.asyncio
async def test_get_follows_redirect(frozen_time, mock_client_session):
    target = 'https://bucket.s3-external-3.amazonaws.com/the-key'
    mock_client_session.add_route('GET', URL, redirect_response(target))
    mock_client_session.add_route('GET', target, fake_response(body=b'moved'))

    result = await make_item(mock_client_session).get()
    assert result.response.body == b'moved'
    assert result.response.url == target
    first, second = mock_client_session.calls
    assert second.headers['Authorization'] == first.headers['Authorization']
    assert second.headers['Date'] == FROZEN_DATE


@pytest.mark.asyncio
async def test_exists(mock_client_session):
    mock_client_session.add_route('HEAD', URL, fake_response(body=b''))
    assert await make_item(mock_client_session).exists()


@pytest.mark.asyncio
async def test_not_exists(mock_client_session):
    mock_client_session.add_route('HEAD', URL, error_response(404, body=b''))
    assert not await make_item(mock_client_session).exists()
    assert mock_client_session.count() == 1


@pytest.mark.asyncio
async def test_exists_raises_on_other_errors(mock_client_session):
    mock_client_session.add_route('HEAD', URL, error_response(403, body=b''))
    with pytest.raises(FatalError) as exc_info:
        await make_item(mock_client_session).exists(retry_count=1)
    assert exc_info.value.status_code == 403
    assert mock_client_session.count() == 2


@pytest.mark.asyncio
async def test_exists_ignores_error_options(mock_client_session):
    mock_client_session.add_route('HEAD', URL, error_response(404, body=b''))
    errors = []
    item = make_item(mock_client_session)
    assert not await item.exists(on_error=errors.append, fatal_statuses=())
    assert errors == []
    assert mock_client_session.count() == 1


@pytest.mark.asyncio
async def test_trace(mock_client_session):
    mock_client_session.add_route('GET', URL, fake_response())
    item = make_item(mock_client_session)
    stream = io.StringIO()
    item.trace_on(stream)
    await item.get()
    assert 'GET /the-key HTTP/1.1' in stream.getvalue()

    item.trace_off()
    await item.get()
    assert stream.getvalue().count('START-HTTP') == 1
