"""Fixed-content manifests and config files of the generated Vite project.

Every function here is pure: same inputs, same bytes.
"""

import html
import json
import textwrap

from records import DesignTokenSet

SOURCE_EXT = ".tsx"

# Bucket (group, label) -> tailwind color key under theme.extend.colors.app
_TOKEN_COLOR_KEYS: list[tuple[str, str, str]] = [
    ("backgrounds", "dark", "bg-dark"),
    ("backgrounds", "dark-alt", "bg-dark-alt"),
    ("backgrounds", "light", "bg-light"),
    ("backgrounds", "light-alt", "bg-light-alt"),
    ("text", "primary", "text-primary"),
    ("text", "secondary", "text-secondary"),
    ("text", "light", "text-light"),
    ("accents", "primary", "accent-primary"),
    ("accents", "secondary", "accent-secondary"),
    ("accents", "tertiary", "accent-tertiary"),
    ("accents", "warning", "accent-warning"),
    ("borders", "default", "border-default"),
]

DEFAULT_APP_COLORS: dict[str, str] = {
    "bg-dark": "#2e2e30",
    "bg-light": "#f9f8f8",
    "text-primary": "#1e1f21",
    "text-light": "#f5f4f3",
    "accent-primary": "#f06a6a",
    "border-default": "#cfcbcb",
}


def _json(data: dict) -> str:
    return json.dumps(data, indent=2) + "\n"


def package_json(app_name: str) -> str:
    return _json({
        "name": app_name,
        "version": "1.0.0",
        "private": True,
        "type": "module",
        "scripts": {
            "dev": "vite",
            "build": "tsc && vite build",
            "preview": "vite preview",
        },
        "dependencies": {
            "lucide-react": "^0.294.0",
            "react": "^18.2.0",
            "react-dom": "^18.2.0",
            "react-router-dom": "^6.20.0",
        },
        "devDependencies": {
            "@types/react": "^18.2.43",
            "@types/react-dom": "^18.2.17",
            "@vitejs/plugin-react": "^4.2.1",
            "autoprefixer": "^10.4.16",
            "postcss": "^8.4.32",
            "tailwindcss": "^3.3.6",
            "typescript": "^5.3.3",
            "vite": "^5.0.8",
        },
    })


def tsconfig_json() -> str:
    return _json({
        "compilerOptions": {
            "target": "ES2020",
            "useDefineForClassFields": True,
            "lib": ["ES2020", "DOM", "DOM.Iterable"],
            "module": "ESNext",
            "skipLibCheck": True,
            "moduleResolution": "bundler",
            "allowImportingTsExtensions": True,
            "resolveJsonModule": True,
            "isolatedModules": True,
            "noEmit": True,
            "jsx": "react-jsx",
            "strict": True,
            "noFallthroughCasesInSwitch": True,
        },
        "include": ["src"],
        "references": [{"path": "./tsconfig.node.json"}],
    })


def tsconfig_node_json() -> str:
    return _json({
        "compilerOptions": {
            "composite": True,
            "skipLibCheck": True,
            "module": "ESNext",
            "moduleResolution": "bundler",
            "allowSyntheticDefaultImports": True,
        },
        "include": ["vite.config.ts"],
    })


def app_colors(tokens: DesignTokenSet | None) -> dict[str, str]:
    """Tailwind `app` color palette from token buckets, or the defaults."""
    colors: dict[str, str] = {}
    if tokens is not None:
        for group, label, key in _TOKEN_COLOR_KEYS:
            value = tokens.buckets.get(group, {}).get(label)
            if value:
                colors[key] = value
    return colors or dict(DEFAULT_APP_COLORS)


def tailwind_config(tokens: DesignTokenSet | None) -> str:
    palette = ",\n".join(
        f"          '{key}': '{value}'" for key, value in app_colors(tokens).items()
    )
    fonts = ""
    if tokens is not None and tokens.font_families:
        fonts = (
            "\n      fontFamily: {\n"
            f"        sans: {json.dumps(tokens.font_families[0])}.split(',').map(f => f.trim()),\n"
            "      },"
        )
    return (
        "/** @type {import('tailwindcss').Config} */\n"
        "export default {\n"
        "  content: ['./index.html', './src/**/*.{js,ts,jsx,tsx}'],\n"
        "  theme: {\n"
        "    extend: {\n"
        "      colors: {\n"
        "        app: {\n"
        f"{palette}\n"
        "        },\n"
        f"      }},{fonts}\n"
        "    },\n"
        "  },\n"
        "  plugins: [],\n"
        "};\n"
    )


POSTCSS_CONFIG = textwrap.dedent("""\
    export default {
      plugins: {
        tailwindcss: {},
        autoprefixer: {},
      },
    };
    """)

VITE_CONFIG = textwrap.dedent("""\
    import { defineConfig } from 'vite';
    import react from '@vitejs/plugin-react';

    export default defineConfig({
      plugins: [react()],
      server: {
        port: 3000,
      },
    });
    """)

MAIN_TSX = textwrap.dedent("""\
    import React from 'react';
    import ReactDOM from 'react-dom/client';
    import App from './App';

    ReactDOM.createRoot(document.getElementById('root')!).render(
      <React.StrictMode>
        <App />
      </React.StrictMode>,
    );
    """)

GLOBAL_CSS = textwrap.dedent("""\
    @tailwind base;
    @tailwind components;
    @tailwind utilities;

    @layer base {
      body {
        @apply antialiased;
      }
    }
    """)


def index_html(title: str) -> str:
    return textwrap.dedent(f"""\
        <!doctype html>
        <html lang="en">
          <head>
            <meta charset="UTF-8" />
            <meta name="viewport" content="width=device-width, initial-scale=1.0" />
            <title>{html.escape(title)}</title>
          </head>
          <body>
            <div id="root"></div>
            <script type="module" src="/src/main.tsx"></script>
          </body>
        </html>
        """)


def readme(title: str, pages: list[str]) -> str:
    page_lines = "\n".join(f"- `src/pages/{name}{SOURCE_EXT}`" for name in pages) or "- (none)"
    return (
        f"# {title}\n\n"
        "Generated by site-replicator from a crawl of the original application.\n\n"
        "## Run\n"
        "```bash\nnpm install\nnpm run dev\n```\n\n"
        "## Pages\n"
        f"{page_lines}\n\n"
        "See `VALIDATION_REPORT.md` for the checklist verdict of every generated file.\n"
    )
