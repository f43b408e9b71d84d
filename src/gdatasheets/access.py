from pathlib import Path
from collections.abc import Callable, Iterable
from urllib.parse import urlparse, parse_qs
from xml.etree import ElementTree
from xml.etree.ElementTree import Element
import copy
import logging
import re
import threading

import requests
import google.auth
import google.auth.exceptions
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from .errors import GDataSheetsError, RemoteError, AuthenticationError

logger = logging.getLogger(__name__)

def parse_document(content: bytes|str) -> Element|None:
    """
    Parse a response body into an element tree.
    DELETE and friends can come back empty, that's None rather than an error.
    """
    if not content or not content.strip():
        return None
    return ElementTree.fromstring(content)

class AuthRetryPolicy():
    """
    What to do when the server rejects our credential.
    callback is invoked with no arguments and should return True if it
    managed to fix things up (fresh login, token refresh, asking the user...),
    in which case the request is tried again.  max_attempts bounds how many
    times that happens for one request, None means keep going as long as
    the callback keeps claiming success.
    """
    def __init__(self, callback: Callable[[], bool]|None = None,
                 max_attempts: int|None = None) -> None:
        if max_attempts is not None and max_attempts < 0:
            raise ValueError(f"max_attempts must be >= 0 not: {max_attempts}")
        self.callback = callback
        self.max_attempts = max_attempts

    def __repr__(self) -> str:
        limit = "unbounded" if self.max_attempts is None else str(self.max_attempts)
        return f"{self.__class__}:{self.callback!r}({limit})"

    def allows(self, attempt: int) -> bool:
        """May recovery number attempt (1-based) go ahead?"""
        if self.callback is None:
            return False
        return self.max_attempts is None or attempt <= self.max_attempts

    def recover(self) -> bool:
        if self.callback is None:
            return False
        return bool(self.callback())

class GDataSession():
    """
    Authenticated access to the spreadsheet feeds.
    Holds the auth token and does the HTTP round trips, every spreadsheet
    and worksheet handle built from the session shares it.  Token changes
    and recovery callbacks are serialised on a lock so handles can be driven
    from different threads.

    A token is obtained with login() (ClientLogin, sent as a GoogleLogin
    header) or taken from OAuth credentials (sent as a Bearer header), see
    from_credentials().
    """
    __DEFAULT_CONFIG = {
        'auth_url': "https://www.google.com/accounts/ClientLogin",
        'account_type': "HOSTED_OR_GOOGLE",
        'service': "wise",
        'source': "gdatasheets-1.0",
        'feeds_base': "https://spreadsheets.google.com/feeds",
        'timeout': 30.0
    }

    def __init__(self, auth_token: str|None = None,
                 retry_policy: AuthRetryPolicy|None = None,
                 http: requests.Session|None = None,
                 config: dict|None = None,
                 token_type: str = "GoogleLogin") -> None:
        self._lock = threading.RLock()
        self._token = auth_token
        self._token_type = token_type
        self._policy = retry_policy if retry_policy is not None else AuthRetryPolicy()
        self._http = http if http is not None else requests.Session()
        self._config = copy.copy(self.__DEFAULT_CONFIG)
        if config:
            self.config = config

    @classmethod
    def login_with(cls, mail: str, password: str, **kwargs) -> "GDataSession":
        """Create a session and login(), kwargs go to the constructor"""
        session = cls(**kwargs)
        session.login(mail, password)
        return session

    @classmethod
    def from_credentials(cls, credentials: Credentials,
                         max_attempts: int|None = 1, **kwargs) -> "GDataSession":
        """
        Session using a google-auth OAuth credential.  The access token is
        sent as a Bearer token and is refreshed through OAuthRecovery when
        the server rejects it.
        """
        session = cls(credentials.token, token_type="Bearer", **kwargs)
        session.retry_policy = AuthRetryPolicy(OAuthRecovery(session, credentials=credentials),
                                               max_attempts)
        return session

    def __bool__(self) -> bool:
        """True if we hold a token"""
        return self.authenticated

    def __str__(self) -> str:
        if self.authenticated:
            return f"Authenticated:{self._token_type}"
        return "Unauthenticated"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    @property
    def authenticated(self) -> bool:
        return bool(self.auth_token)

    @property
    def auth_token(self) -> str|None:
        with self._lock:
            return self._token

    @auth_token.setter
    def auth_token(self, value: str|None) -> None:
        self.set_token(value, self._token_type)

    @property
    def token_type(self) -> str:
        return self._token_type

    def set_token(self, token: str|None, token_type: str = "GoogleLogin") -> None:
        """Install a new token, token_type decides the Authorization scheme"""
        with self._lock:
            self._token = token
            self._token_type = token_type

    @property
    def retry_policy(self) -> AuthRetryPolicy:
        return self._policy

    @retry_policy.setter
    def retry_policy(self, value: AuthRetryPolicy) -> None:
        with self._lock:
            self._policy = value

    @property
    def on_auth_fail(self) -> Callable[[], bool]|None:
        """
        Called when authentication has failed.
        When it returns True the failed operation is tried again.
        """
        return self._policy.callback

    @on_auth_fail.setter
    def on_auth_fail(self, value: Callable[[], bool]|None) -> None:
        with self._lock:
            self._policy.callback = value

    @property
    def config(self) -> dict:
        """
        Get all configuration state as a dict.
        Convenience for getting it all at once for pushing into a json, toml, ini, etc, file.
        """
        return copy.copy(self._config)

    @config.setter
    def config(self, config: dict) -> None:
        """
        Set configuration state from a dict, unknown keys are ignored.
        Convenience method for inserting state pulled from a config file or equivalent.
        """
        for k in self.__DEFAULT_CONFIG:
            v = config.get(k, None)
            if v is not None:
                self._config[k] = float(v) if k == 'timeout' else str(v)
        if 'timeout' in config and config['timeout'] is None:
            self._config['timeout'] = None

    @property
    def feeds_base(self) -> str:
        return self._config['feeds_base'].rstrip('/')

    def http_header(self, token: str|None = None) -> dict[str,str]:
        """Authorization header for the current (or given) token"""
        with self._lock:
            t = self._token if token is None else token
            scheme = self._token_type
        if not t:
            return {}
        if scheme == "Bearer":
            return {"Authorization": f"Bearer {t}"}
        return {"Authorization": f"GoogleLogin auth={t}"}

    def login(self, mail: str, password: str) -> bool:
        """
        Authenticates with given mail and password and updates the current
        session if that succeeds.  Raises AuthenticationError if it fails and
        the on_auth_fail callback doesn't recover.
        Google Apps accounts are supported.
        """
        params = {
            "accountType": self._config['account_type'],
            "Email": mail,
            "Passwd": password,
            "service": self._config['service'],
            "source": self._config['source'],
        }
        with self._lock:
            self._token = None
            try:
                response = self._http.request("POST", self._config['auth_url'], data=params,
                                              timeout=self._config['timeout'])
                if not 200 <= response.status_code < 300:
                    raise AuthenticationError(f"response code {response.status_code}: {response.text}",
                                              response.status_code, response.text,
                                              "POST", self._config['auth_url'])
                m = re.search(r"^Auth=(.*)$", response.text, re.MULTILINE)
                if not m:
                    raise AuthenticationError("no Auth token in response", response.status_code,
                                              response.text, "POST", self._config['auth_url'])
            except AuthenticationError as e:
                if self._policy.recover():
                    return True
                raise AuthenticationError(f"authentication failed for {mail}: {e}",
                                          e.status, e.body, e.method, e.url) from e
            self._token = m.group(1).strip()
            self._token_type = "GoogleLogin"
        logger.debug("logged in as %s", mail)
        return True

    def _recover(self, failed_token: str|None, attempt: int) -> bool:
        """
        A request was rejected with failed_token.  If another user of the
        session replaced the token meanwhile just try again, otherwise run
        the recovery callback, one at a time.
        """
        if not self._policy.allows(attempt):
            return False
        with self._lock:
            if self._token != failed_token:
                return True
            logger.warning("authorization failed, attempting recovery (%d)", attempt)
            return self._policy.recover()

    def request(self, method: str, url: str, body: str|None = None,
                params: dict|None = None) -> Element|None:
        """
        Send a request and parse the response.
        401 goes through the retry policy, any other non-2xx raises RemoteError.
        """
        attempt = 0
        while True:
            with self._lock:
                token = self._token
            headers = self.http_header(token)
            data = None
            if body is not None:
                headers["Content-Type"] = "application/atom+xml"
                data = body.encode('utf-8')
            logger.debug("%s %s %s", method, url, params or "")
            response = self._http.request(method, url, params=params, data=data,
                                          headers=headers, timeout=self._config['timeout'])
            status = response.status_code
            if status == 401:
                attempt += 1
                if self._recover(token, attempt):
                    continue
                raise AuthenticationError(f"authorization failed for {method} {url}: {response.text}",
                                          status, response.text, method, url)
            if not 200 <= status < 300:
                raise RemoteError(status, response.text, method, url)
            try:
                return parse_document(response.content)
            except ElementTree.ParseError as e:
                raise GDataSheetsError(f"malformed response for {method} {url}: {e}") from e

    def get(self, url: str, params: dict|None = None) -> Element|None:
        return self.request("GET", url, params=params)

    def post(self, url: str, body: str) -> Element|None:
        return self.request("POST", url, body)

    def put(self, url: str, body: str) -> Element|None:
        return self.request("PUT", url, body)

    def delete(self, url: str) -> Element|None:
        return self.request("DELETE", url)

    def spreadsheet_by_key(self, key: str):
        """
        Spreadsheet with the given key, the key is the id in the
        spreadsheet's browser URL.
        """
        from .sheets.spreadsheet import Spreadsheet
        return Spreadsheet(self, f"{self.feeds_base}/worksheets/{key}/private/full")

    def spreadsheet_by_url(self, url: str):
        """
        Spreadsheet from either the URL you open in the browser or the
        worksheets feed URL of the spreadsheet.
        """
        from .sheets.spreadsheet import Spreadsheet
        u = urlparse(url)
        if u.path.endswith("/ccc"):
            keys = parse_qs(u.query).get("key")
            if keys:
                return self.spreadsheet_by_key(keys[0])
        m = re.search(r"/spreadsheets/d/([^/]+)", u.path)
        if m:
            return self.spreadsheet_by_key(m.group(1))
        return Spreadsheet(self, url)

    def worksheet_by_url(self, url: str):
        """Worksheet from the URL of its cells feed."""
        from .sheets.worksheet import Worksheet
        return Worksheet(self, url)

class OAuthRecovery():
    """
    Recovery callback for OAuth credentials.
    See https://developers.google.com/workspace/guides/create-credentials#choose_the_access_credential_that_is_right_for_you
    for an overview of what you'll need.  On an authorization failure it
    refreshes the credentials if there is a refresh token, otherwise runs the
    local server flow from a client secrets file, and as a last resort looks
    for application default credentials.  The resulting access token is put
    on the session.
    """
    SCOPES = ["https://spreadsheets.google.com/feeds"]
    __DEFAULT_AUTH_PROMPT_MSG = "Please visit this URL to authorize access to your spreadsheets: {url}"
    __DEFAULT_AUTH_FLOW_SUCCESS_MSG = "Authorization complete, you may close this window."

    def __init__(self, session: GDataSession,
                 credentials: Credentials|None = None,
                 client_secrets: Path|str|None = None,
                 scopes: Iterable[str]|None = None,
                 use_default: bool = False) -> None:
        self._session = session
        self._creds = credentials
        self._secrets = Path(client_secrets) if client_secrets is not None else None
        self._scopes = list(scopes) if scopes is not None else list(self.SCOPES)
        self._use_default = use_default
        self.auth_server = 'localhost'
        self.auth_port = 0
        self.auth_prompt_msg = self.__DEFAULT_AUTH_PROMPT_MSG
        self.auth_flow_success_msg = self.__DEFAULT_AUTH_FLOW_SUCCESS_MSG

    @property
    def credentials(self) -> Credentials|None:
        return self._creds

    def __call__(self) -> bool:
        creds = self._creds
        if creds is not None and getattr(creds, "refresh_token", None):
            try:
                creds.refresh(Request())
            except google.auth.exceptions.RefreshError as e:
                logger.warning("failed to refresh credentials: %s", e)
        if (creds is None or not creds.valid) and self._secrets is not None and self._secrets.is_file():
            flow = InstalledAppFlow.from_client_secrets_file(str(self._secrets), self._scopes)
            creds = flow.run_local_server(host=self.auth_server, port=self.auth_port,
                                          authorization_prompt_message=self.auth_prompt_msg,
                                          success_message=self.auth_flow_success_msg)
        if (creds is None or not creds.valid) and self._use_default:
            try:
                # GOOGLE_APPLICATION_CREDENTIALS and the other cloud default locations
                creds, _ = google.auth.default(self._scopes)
                creds.refresh(Request())
            except google.auth.exceptions.GoogleAuthError as e:
                logger.warning("no usable default credentials: %s", e)
                return False
        if creds is None or not creds.valid:
            return False
        self._creds = creds
        self._session.set_token(creds.token, "Bearer")
        return True
