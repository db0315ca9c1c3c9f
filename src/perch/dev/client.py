"""Live-reload client for development mode.

A tiny script that polls the live transformer for a source
fingerprint and reloads the page when it changes. Injected into the
index template by ``LiveServer.transform_index_html``.
"""

CLIENT_PATH = "/@perch/client.js"
VERSION_PATH = "/@perch/version"

CLIENT_SNIPPET = f'<script type="module" src="{CLIENT_PATH}"></script>'

CLIENT_JS = f"""\
const VERSION_URL = "{VERSION_PATH}";
const INTERVAL_MS = 1000;
let current = null;

async function poll() {{
  try {{
    const res = await fetch(VERSION_URL, {{ cache: "no-store" }});
    if (res.ok) {{
      const {{ version }} = await res.json();
      if (current === null) {{
        current = version;
        console.debug("[perch] connected");
      }} else if (version !== current) {{
        console.debug("[perch] source changed, reloading");
        location.reload();
        return;
      }}
    }}
  }} catch (err) {{
    console.debug("[perch] server unreachable, retrying", err);
  }}
  setTimeout(poll, INTERVAL_MS);
}}

poll();
"""
