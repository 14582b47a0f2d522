"""Pytest configuration and fixtures."""

import io
import os

import pytest

# Set test environment variables before importing settings
os.environ.update(
    {
        "POSTAL_MIME_HOSTNAME": "mail.test.local",
        "POSTAL_MIME_MAX_MESSAGE_SIZE": "1048576",
    }
)


@pytest.fixture
def mock_settings():
    """Settings built from the test environment."""
    from postal_mime.config import Settings

    return Settings(_env_file=None)


@pytest.fixture
def dummy_message():
    """A message with every structured field set and no attachments."""
    from postal_mime.models import Message

    return Message(
        sender="John Smith <test@gmail.com>",
        to=["test@example.com"],
        cc=["test_cc@example.com"],
        bcc=["test_bcc@example.com", "test2_bcc@example.com"],
        subject="Awesome Subject",
        text=b"Text Body is, of course, supported!\n",
        html=b"<h1>Fancy Html is supported, too!</h1>\n",
    )


@pytest.fixture
def sample_email_bytes():
    """Sample single-part raw email bytes."""
    return b"""From: "Foo Bar" <foobar@example.com>
Content-Type: text/plain
To: foobar@example.com
Subject: Example Subject (no MIME Type)
Message-ID: <foobar@example.com>

This is a test message!"""


@pytest.fixture
def alternative_email_bytes():
    """Multipart/alternative message with a quoted-printable HTML part."""
    return b"""MIME-Version: 1.0
Subject: Test Subject
From: John Smith <jsmith@gmail.com>
To: John Smith <jsmith@gmail.com>
Content-Type: multipart/alternative; boundary=001a114fb3fc42fd6b051f834280

--001a114fb3fc42fd6b051f834280
Content-Type: text/plain; charset=UTF-8

This is a test email with HTML Formatting. It also has very long lines so
that the content must be wrapped if using quoted-printable decoding.

--001a114fb3fc42fd6b051f834280
Content-Type: text/html; charset=UTF-8
Content-Transfer-Encoding: quoted-printable

<div dir=3D"ltr">This is a test email with <b>HTML Formatting.</b>=C2=A0It =
also has very long lines so that the content must be wrapped if using quote=
d-printable decoding.</div>

--001a114fb3fc42fd6b051f834280--"""


@pytest.fixture
def signed_email_bytes():
    """Nested mixed -> signed message whose first leaf has no Content-Type."""
    return b"""From: Mikhail Gusarov <dottedmag@dottedmag.net>
To: notmuch@notmuchmail.org
References: <20091117190054.GU3165@dottiness.seas.harvard.edu>
Date: Wed, 18 Nov 2009 01:02:38 +0600
Message-ID: <87iqd9rn3l.fsf@vertex.dottedmag>
MIME-Version: 1.0
Subject: Re: [notmuch] Working with Maildir storage?
Content-Type: multipart/mixed; boundary="===============1958295626=="

--===============1958295626==
Content-Type: multipart/signed; boundary="=-=-=";
    micalg=pgp-sha1; protocol="application/pgp-signature"

--=-=-=
Content-Transfer-Encoding: quoted-printable

Twas brillig at 14:00:54 17.11.2009 UTC-05 when lars@seas.harvard.edu did g=
yre and gimble:

--=-=-=
Content-Type: application/pgp-signature

-----BEGIN PGP SIGNATURE-----
Version: GnuPG v1.4.9 (GNU/Linux)

iQIcBAEBAgAGBQJLAvNOAAoJEJ0g9lA+M4iIjLYQAKp0PXEgl3JMOEBisH52AsIK
=/ksP
-----END PGP SIGNATURE-----
--=-=-=--

--===============1958295626==
Content-Type: text/plain; charset="us-ascii"
MIME-Version: 1.0
Content-Transfer-Encoding: 7bit
Content-Disposition: inline

Testing!
--===============1958295626==--
"""


@pytest.fixture
def attachment_source():
    """Factory for in-memory attachment sources."""

    def _make(data: bytes = b"awesome attachment") -> io.BytesIO:
        return io.BytesIO(data)

    return _make
