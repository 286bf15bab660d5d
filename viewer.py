#!/usr/bin/env python3
"""
Web configurator for the base product catalog.

Pick a garment category, a base product and feature toggles, then copy the
rendered block. Data is loaded once per server process.

Usage:
    python viewer.py                         # Load from ./data
    python viewer.py --data-dir /path/data   # Another directory
    python viewer.py --base-url https://host/data

Then open http://localhost:5001 in your browser.
"""
import argparse
import sys
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, render_template_string, request
from rich.console import Console

sys.path.insert(0, str(Path(__file__).parent))

from config.settings import PipelineConfig, config
from src.catalog import CatalogSnapshot
from src.errors import SourceUnavailable
from src.pipeline import load_catalog
from src.state import (
    SelectionState,
    copy_text,
    current_tags,
    feature_options,
    filtered_bases,
    initial_state,
    select_base,
    select_category,
    set_query,
    toggle_feature,
)
from src.transformers.copy_block import format_price
from src.transformers.feature_tags import FEATURE_LABELS, Feature, tier_label

console = Console()

app = Flask(__name__)

PIPELINE_CONFIG: PipelineConfig = config

# Loaded on first request
SNAPSHOT: Optional[CatalogSnapshot] = None


def get_snapshot() -> CatalogSnapshot:
    """Load the catalog once; a failed load is retried on the next request."""
    global SNAPSHOT
    if SNAPSHOT is None:
        SNAPSHOT = load_catalog(PIPELINE_CONFIG)
    return SNAPSHOT


@app.errorhandler(SourceUnavailable)
def handle_source_unavailable(e):
    return jsonify({"error": str(e), "source": e.source}), 503


def base_to_dict(base) -> dict:
    return {
        "code": base.code,
        "label": base.label,
        "brand": base.brand,
        "model_name": base.model_name,
        "category": base.category,
        "tier": base.tier,
        "tier_label": tier_label(base.tier, PIPELINE_CONFIG.catalog.tier_labels),
        "organic": base.organic,
        "usa_made": base.usa_made,
        "retail_price": base.retail_price,
        "price_display": f"${format_price(base.retail_price)}",
        "fit_notes": base.fit_notes,
    }


def state_from_request(snapshot: CatalogSnapshot, payload: dict) -> SelectionState:
    """Replay the requested selection through the state transitions."""
    state = initial_state(snapshot)
    if payload.get("category"):
        state = select_category(state, snapshot, payload["category"])
    if payload.get("base_code"):
        state = select_base(state, snapshot, payload["base_code"])
    for feature in dict.fromkeys(payload.get("features") or []):
        if feature not in state.features:
            state = toggle_feature(state, snapshot, feature)
    if payload.get("query"):
        state = set_query(state, payload["query"])
    return state


def state_to_dict(state: SelectionState, snapshot: CatalogSnapshot) -> dict:
    return {
        "category": state.category,
        "base_code": state.base_code,
        "features": sorted(state.features),
        "query": state.query,
        "bases": [base_to_dict(b) for b in filtered_bases(state, snapshot)],
        "feature_options": feature_options(state, snapshot),
        "tags": current_tags(state, snapshot),
        "text": copy_text(state, snapshot, PIPELINE_CONFIG.catalog),
    }


@app.route("/")
def index():
    """Serve the configurator page."""
    return render_template_string(
        HTML_TEMPLATE,
        feature_labels={f.value: FEATURE_LABELS[f] for f in Feature},
    )


@app.route("/api/catalog")
def api_catalog():
    """Categories with labels plus the initial selection."""
    snapshot = get_snapshot()
    return jsonify(
        {
            "categories": [
                {"code": c, "label": PIPELINE_CONFIG.catalog.category_label(c)}
                for c in snapshot.categories()
            ],
            "last_updated": snapshot.meta.display(),
            "state": state_to_dict(initial_state(snapshot), snapshot),
        }
    )


@app.route("/api/bases")
def api_bases():
    """Active bases for one category (first category when omitted)."""
    snapshot = get_snapshot()
    category = request.args.get("category")
    state = initial_state(snapshot)
    if category:
        if category not in snapshot.categories():
            return jsonify({"error": f"Unknown category '{category}'"}), 404
        state = select_category(state, snapshot, category)
    return jsonify([base_to_dict(b) for b in snapshot.bases_for_category(state.category)])


@app.route("/api/render", methods=["POST"])
def api_render():
    """Apply a selection and return the copy block with toggle states."""
    snapshot = get_snapshot()
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Expected a JSON object"}), 400
    features = payload.get("features")
    if features is not None and not (
        isinstance(features, list) and all(isinstance(f, str) for f in features)
    ):
        return jsonify({"error": "features must be a list of strings"}), 400
    for key in ("category", "base_code", "query"):
        if payload.get(key) is not None and not isinstance(payload[key], str):
            return jsonify({"error": f"{key} must be a string"}), 400
    state = state_from_request(snapshot, payload)
    return jsonify(state_to_dict(state, snapshot))


@app.route("/api/variants")
def api_variants():
    """Sellable variants, optionally for one base and/or matching ?q= text."""
    snapshot = get_snapshot()
    base_code = request.args.get("base_code") or None
    query = request.args.get("q", "")
    return jsonify([v.model_dump() for v in snapshot.active_variants(base_code, query=query)])


@app.route("/api/meta")
def api_meta():
    snapshot = get_snapshot()
    last_updated = snapshot.meta.last_updated
    return jsonify(
        {
            "last_updated": last_updated.isoformat() if last_updated else None,
            "display": snapshot.meta.display(),
        }
    )


# HTML Template with embedded CSS and JavaScript
HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Base Product Catalog</title>
    <style>
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: system-ui, -apple-system, 'Segoe UI', Roboto, sans-serif;
            background: #fff;
            color: #111;
            padding: 20px;
        }
        h1 { font-size: 28px; }
        .subtitle { margin-top: 8px; color: #555; }
        #last-updated {
            position: fixed; top: 8px; right: 8px;
            padding: 4px 8px; font-size: 12px;
            background: #fff; border-radius: 6px;
            box-shadow: 0 1px 4px rgba(0,0,0,0.12); opacity: 0.8;
        }
        .chips { display: flex; gap: 8px; flex-wrap: wrap; margin-top: 12px; }
        .chip {
            padding: 8px 12px; border-radius: 999px;
            border: 1px solid #ddd; background: #fff; color: #111; cursor: pointer;
        }
        .chip.active { border-color: #111; background: #111; color: #fff; }
        .chip:disabled { opacity: 0.4; cursor: not-allowed; }
        section { margin-top: 20px; }
        h2 { margin-bottom: 8px; font-size: 18px; }
        input[type=search] { padding: 6px 10px; width: 280px; border: 1px solid #ddd; border-radius: 6px; }
        ul.bases { list-style: none; margin-top: 8px; }
        ul.bases li { padding: 6px 8px; border-radius: 6px; cursor: pointer; }
        ul.bases li.active { background: #f0f0f0; font-weight: 600; }
        pre {
            margin-top: 8px; padding: 12px; background: #fafafa;
            border: 1px solid #eee; border-radius: 8px; white-space: pre-wrap;
        }
        #copy { margin-top: 8px; padding: 8px 16px; border-radius: 6px; border: none; background: #111; color: #fff; cursor: pointer; }
        #toast {
            position: fixed; bottom: 16px; right: 16px; padding: 10px 14px;
            border-radius: 8px; background: #111; color: #fff; display: none;
        }
        .error { color: #b00; }
    </style>
</head>
<body>
    <div id="last-updated" style="display:none"></div>
    <h1>Base Product Catalog</h1>
    <p class="subtitle">Pick a garment type, a base and any extra features, then copy the block.</p>
    <p id="status">Loading…</p>

    <div id="app" style="display:none">
        <div class="chips" id="categories"></div>

        <section>
            <h2>Base options</h2>
            <input type="search" id="query" placeholder="Filter by label, brand, model, code…">
            <ul class="bases" id="bases"></ul>
        </section>

        <section>
            <h2>Features</h2>
            <div class="chips" id="features"></div>
        </section>

        <section>
            <h2>Copy block</h2>
            <pre id="block"></pre>
            <button id="copy">Copy</button>
        </section>

        <section>
            <h2>Designs</h2>
            <input type="search" id="design-query" placeholder="Search title, brand, model, SKU…">
            <ul class="bases" id="designs"></ul>
        </section>
    </div>
    <div id="toast"></div>

    <script>
        const FEATURE_LABELS = {{ feature_labels | tojson }};
        let state = null;

        function toast(message) {
            const el = document.getElementById('toast');
            el.textContent = message;
            el.style.display = 'block';
            setTimeout(() => { el.style.display = 'none'; }, 2500);
        }

        async function render(changes) {
            const body = Object.assign({
                category: state.category,
                base_code: state.base_code,
                features: state.features,
                query: state.query,
            }, changes);
            const res = await fetch('/api/render', {
                method: 'POST',
                headers: {'Content-Type': 'application/json'},
                body: JSON.stringify(body),
            });
            state = await res.json();
            draw();
        }

        function draw() {
            document.querySelectorAll('#categories .chip').forEach(chip => {
                chip.classList.toggle('active', chip.dataset.code === state.category);
            });

            const bases = document.getElementById('bases');
            bases.innerHTML = '';
            state.bases.forEach(b => {
                const li = document.createElement('li');
                li.textContent = `${b.label} - ${b.price_display} (${b.tier_label})`;
                li.classList.toggle('active', b.code === state.base_code);
                li.onclick = () => render({base_code: b.code});
                bases.appendChild(li);
            });

            const features = document.getElementById('features');
            features.innerHTML = '';
            Object.entries(state.feature_options).forEach(([key, opt]) => {
                const btn = document.createElement('button');
                btn.className = 'chip' + (opt.on ? ' active' : '');
                btn.textContent = FEATURE_LABELS[key] || key;
                btn.disabled = !opt.available || opt.locked;
                btn.onclick = () => {
                    const next = state.features.includes(key)
                        ? state.features.filter(f => f !== key)
                        : state.features.concat([key]);
                    render({features: next});
                };
                features.appendChild(btn);
            });

            document.getElementById('block').textContent = state.text;
        }

        async function copyToClipboard(text) {
            try {
                await navigator.clipboard.writeText(text);
                return true;
            } catch (e) {
                const textarea = document.createElement('textarea');
                textarea.value = text;
                textarea.style.position = 'fixed';
                textarea.style.left = '-9999px';
                document.body.appendChild(textarea);
                textarea.focus();
                textarea.select();
                let ok = false;
                try { ok = document.execCommand('copy'); } catch (err) { ok = false; }
                document.body.removeChild(textarea);
                return ok;
            }
        }

        document.getElementById('copy').onclick = async () => {
            const ok = await copyToClipboard(state.text);
            toast(ok ? 'Copied to clipboard' : "Couldn't copy. Select & copy manually.");
        };

        document.getElementById('query').oninput = (e) => render({query: e.target.value});

        async function searchDesigns(text) {
            const res = await fetch('/api/variants?q=' + encodeURIComponent(text));
            const designs = document.getElementById('designs');
            designs.innerHTML = '';
            if (!res.ok) return;
            (await res.json()).forEach(v => {
                const li = document.createElement('li');
                li.textContent = `${v.title} / ${v.color} / ${v.size} (${v.sku})`;
                designs.appendChild(li);
            });
        }

        document.getElementById('design-query').oninput = (e) => searchDesigns(e.target.value);

        (async () => {
            const status = document.getElementById('status');
            try {
                const res = await fetch('/api/catalog');
                const data = await res.json();
                if (!res.ok) throw new Error(data.error || res.status);
                if (!data.categories.length) {
                    status.textContent = 'No active base products found.';
                    return;
                }
                const cats = document.getElementById('categories');
                data.categories.forEach(c => {
                    const chip = document.createElement('button');
                    chip.className = 'chip';
                    chip.dataset.code = c.code;
                    chip.textContent = c.label;
                    chip.onclick = () => render({category: c.code, base_code: null});
                    cats.appendChild(chip);
                });
                if (data.last_updated) {
                    const lu = document.getElementById('last-updated');
                    lu.textContent = data.last_updated;
                    lu.style.display = 'block';
                }
                state = data.state;
                status.style.display = 'none';
                document.getElementById('app').style.display = 'block';
                searchDesigns('');
                draw();
            } catch (e) {
                status.textContent = 'Error: ' + e.message;
                status.className = 'error';
            }
        })();
    </script>
</body>
</html>
"""


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Base product catalog web viewer")
    parser.add_argument("--port", type=int, default=5001, help="Port to serve on (default: 5001)")
    parser.add_argument("--data-dir", type=str, help="Directory containing the CSV/JSON sources")
    parser.add_argument("--base-url", type=str, help="Fetch sources over HTTP from this URL")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    if args.data_dir:
        PIPELINE_CONFIG.sources.data_dir = Path(args.data_dir)
    if args.base_url:
        PIPELINE_CONFIG.sources.base_url = args.base_url

    console.print("\n[bold cyan]═══════════════════════════════════════════[/bold cyan]")
    console.print("[bold cyan]        BASE PRODUCT CATALOG VIEWER        [/bold cyan]")
    console.print("[bold cyan]═══════════════════════════════════════════[/bold cyan]\n")

    source = PIPELINE_CONFIG.sources.base_url or PIPELINE_CONFIG.sources.data_dir
    console.print(f"[dim]Data Source:[/dim] {source}")

    try:
        snapshot = get_snapshot()
    except SourceUnavailable as e:
        # the page shows the error; keep serving so the data can be fixed and reloaded
        console.print(f"[red]✗ {e}[/red]")
    else:
        console.print(f"[dim]Categories:[/dim]  {', '.join(snapshot.categories()) or 'none'}")

    console.print(f"\n[bold]🌐  http://localhost:{args.port}[/bold]")
    console.print("[dim]Press CTRL+C to stop the server[/dim]\n")

    app.run(debug=True, port=args.port)
