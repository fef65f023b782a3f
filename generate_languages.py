#!/usr/bin/env python3
"""
GitHub Top Languages Card Generator
Sums language bytes across a user's public, non-fork repositories and renders
the top 8 as a horizontal bar chart for the GitHub profile README.

Environment:
  GITHUB_TOKEN      token sent as a Bearer credential
  GITHUB_USERNAME   login whose repositories are scanned

Output file:
  assets/languages.svg   (450 wide, height grows with the number of bars)
"""

import os
import sys
import time
from decimal import Decimal, ROUND_HALF_UP
from xml.sax.saxutils import escape

import requests

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------
GITHUB_API = "https://api.github.com/graphql"

REPO_LIMIT         = 100
LANGUAGES_PER_REPO = 10
TOP_N              = 8

REQUEST_TIMEOUT = 30
MAX_ATTEMPTS    = 2

OUTPUT_DIR  = "assets"
OUTPUT_FILE = "languages.svg"


class Config:
    """Credentials for one run, read once from the environment."""

    def __init__(self, token, username):
        self.token = token
        self.username = username

    @classmethod
    def from_env(cls, environ=None):
        # Missing values are passed through; GitHub reports them as errors.
        env = os.environ if environ is None else environ
        return cls(
            token=env.get("GITHUB_TOKEN", ""),
            username=env.get("GITHUB_USERNAME", ""),
        )

    def __repr__(self):
        token = "***" if self.token else ""
        return f"Config(token={token!r}, username={self.username!r})"


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------
THEME = {
    "card_bg": "#0d0d0d",
    "track":   "#1a1a1a",
    "fill":    "#ffffff",
    "text":    "#e6e6e6",
    "muted":   "#808080",
}

FONT = "ui-monospace, SFMono-Regular, 'SF Mono', Menlo, Consolas, monospace"

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class QueryError(Exception):
    """GitHub answered the GraphQL query with an error list instead of data."""

    def __init__(self, errors):
        self.errors = errors
        messages = []
        for err in errors or []:
            if isinstance(err, dict):
                messages.append(err.get("message") or str(err))
            else:
                messages.append(str(err))
        super().__init__("GraphQL query failed: " + ("; ".join(messages) or "unknown error"))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def fmt_num(n):
    """Format a coordinate the way JavaScript prints numbers: 144.0 -> '144'."""
    n = float(n)
    if n.is_integer():
        return str(int(n))
    return repr(n)


def format_percentage(value):
    """One fractional digit, halves rounded up on the exact binary value."""
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def gql_request(query, variables, token):
    """Execute a GitHub GraphQL request and return its `data` payload."""
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }
    payload = {"query": query, "variables": variables}
    for attempt in range(MAX_ATTEMPTS):
        try:
            r = requests.post(GITHUB_API, headers=headers, json=payload,
                              timeout=REQUEST_TIMEOUT)
            break
        except (requests.ConnectionError, requests.Timeout) as e:
            if attempt + 1 >= MAX_ATTEMPTS:
                raise
            print(f"Request failed (attempt {attempt + 1}): {e}", file=sys.stderr)
            time.sleep(2 ** attempt)

    try:
        data = r.json()
    except ValueError:
        r.raise_for_status()
        raise
    errors = data.get("errors")
    if errors is not None:
        raise QueryError(errors)
    r.raise_for_status()
    return data.get("data") or {}


# ---------------------------------------------------------------------------
# GraphQL queries
# ---------------------------------------------------------------------------

def build_languages_query(repo_limit=REPO_LIMIT, languages_per_repo=LANGUAGES_PER_REPO):
    """Owned public non-fork repos, each with its largest languages first."""
    return f"""
    query($username: String!) {{
      user(login: $username) {{
        repositories(first: {repo_limit}, ownerAffiliations: OWNER, isFork: false, privacy: PUBLIC) {{
          nodes {{
            languages(first: {languages_per_repo}, orderBy: {{field: SIZE, direction: DESC}}) {{
              edges {{
                size
                node {{
                  name
                }}
              }}
            }}
          }}
        }}
      }}
    }}
    """


# ---------------------------------------------------------------------------
# Data fetching
# ---------------------------------------------------------------------------

def fetch_languages(config):
    """Return the repository nodes, each carrying its language edges."""
    data = gql_request(build_languages_query(), {"username": config.username}, config.token)
    user = data.get("user")
    if user is None:
        raise QueryError([{"message": f"No user data returned for {config.username!r}"}])
    return (user.get("repositories") or {}).get("nodes") or []


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def sum_language_sizes(repos):
    totals = {}
    for repo in repos:
        for edge in ((repo or {}).get("languages") or {}).get("edges") or []:
            name = edge["node"]["name"]
            totals[name] = totals.get(name, 0) + edge.get("size", 0)
    return totals


def aggregate_languages(repos, top_n=TOP_N):
    """Rank languages by total bytes and share out the top `top_n`.

    Ties on size are ordered by name so the ranking does not depend on the
    order repositories came back in. Percentages are relative to the kept
    languages only, so they add up to 100 (give or take rounding).
    """
    totals = sum_language_sizes(repos)
    ranked = sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))[:top_n]
    total = sum(size for _, size in ranked)

    languages = []
    for name, size in ranked:
        pct = size / total * 100 if total else 0.0
        languages.append({
            "name":       name,
            "size":       size,
            "percentage": format_percentage(pct),
        })
    return languages


# ---------------------------------------------------------------------------
# SVG building utilities
# ---------------------------------------------------------------------------

def svg_open(width, height):
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">\n'
    )


def svg_close():
    return "</svg>\n"


def svg_rect(x, y, w, h, fill, rx=4):
    return (
        f'<rect x="{fmt_num(x)}" y="{fmt_num(y)}" width="{fmt_num(w)}" '
        f'height="{fmt_num(h)}" fill="{fill}" rx="{rx}"/>\n'
    )


def svg_text(x, y, text, size, fill, anchor=None):
    a = f' text-anchor="{anchor}"' if anchor else ""
    return (
        f'<text x="{fmt_num(x)}" y="{fmt_num(y)}" font-family="{FONT}" '
        f'font-size="{size}" fill="{fill}"{a}>{escape(text)}</text>\n'
    )


# ---------------------------------------------------------------------------
# Card: Top Languages bar chart  (450 x variable)
# ---------------------------------------------------------------------------
WIDTH        = 400
LABEL_MARGIN = 50
BAR_HEIGHT   = 28
BAR_GAP      = 8
PADDING      = 20
BAR_START_X  = 140
BAR_WIDTH    = WIDTH - BAR_START_X - PADDING


def card_height(n_bars):
    return PADDING * 2 + n_bars * (BAR_HEIGHT + BAR_GAP) - BAR_GAP


def fill_width(percentage):
    return float(percentage) / 100 * BAR_WIDTH


def make_languages_svg(languages, theme=THEME):
    W, H = WIDTH + LABEL_MARGIN, card_height(len(languages))
    svg = svg_open(W, H)
    svg += f'<rect width="100%" height="100%" fill="{theme["card_bg"]}" rx="8"/>\n'

    for i, lang in enumerate(languages):
        y = PADDING + i * (BAR_HEIGHT + BAR_GAP)
        # Baseline sits 5 below the bar's vertical center.
        text_y = y + BAR_HEIGHT // 2 + 5

        svg += "<g>\n"
        svg += svg_text(BAR_START_X - 10, text_y, lang["name"],
                        size=13, fill=theme["text"], anchor="end")
        svg += svg_rect(BAR_START_X, y, BAR_WIDTH, BAR_HEIGHT, fill=theme["track"])
        svg += svg_rect(BAR_START_X, y, fill_width(lang["percentage"]), BAR_HEIGHT,
                        fill=theme["fill"])
        svg += svg_text(BAR_START_X + BAR_WIDTH + 8, text_y, f'{lang["percentage"]}%',
                        size=11, fill=theme["muted"])
        svg += "</g>\n"

    svg += svg_close()
    return svg


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def write_svg(svg, base_dir=None):
    out_dir = os.path.join(base_dir or os.getcwd(), OUTPUT_DIR)
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, OUTPUT_FILE)
    with open(path, "w", encoding="utf-8") as f:
        f.write(svg)
    return path


def run(config):
    print("Fetching language data for", config.username or "<unset user>", "...")
    repos = fetch_languages(config)

    print(f"Aggregating languages across {len(repos)} repositories...")
    languages = aggregate_languages(repos)
    print("Top languages:")
    for lang in languages:
        print(f"  {lang['name']:<20} {lang['size']:>12}  {lang['percentage']}%")

    print("Generating SVG...")
    svg = make_languages_svg(languages)

    path = write_svg(svg)
    print(f"SVG written to {path}")
    return path


def main():
    try:
        run(Config.from_env())
    except QueryError as e:
        print(f"GraphQL errors: {e.errors}", file=sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e!r}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
