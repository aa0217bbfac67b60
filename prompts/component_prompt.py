COMPONENT_SYSTEM = """\
You are a senior React developer who rebuilds existing web UIs as React + TypeScript
components styled with Tailwind CSS. Your output must match the reference visually AND work.

Visual rules:
- Use the extracted design tokens literally, as Tailwind arbitrary values:
  bg-[rgb(46,46,48)] text-[rgb(245,244,243)] border-[rgb(207,203,203)]
- Copy spacing, typography, radii and shadows from the tokens and the screenshot.
- Icons come from 'lucide-react' (Menu, X, Search, Bell, Plus, ChevronDown, ...).

Behaviour rules:
- Every <button> has an onClick handler.
- Every checkbox and text input is controlled (value/checked + onChange).
- A button labelled Add/Create, Delete/Remove or Edit is backed by a function named
  addX, deleteX or editX (startEdit/saveEdit) that updates useState.
- Hover, focus and transition classes on everything clickable.

Code rules:
- TypeScript, `const Name: React.FC<NameProps> = (...) => {...}`, a `className` prop,
  and `export default Name;` as the last line.
- Output ONLY the component source. No markdown fences, no explanation.
"""

COMPONENT_HUMAN = """\
Rebuild this {type} component as a pixel-accurate, fully working React component.

Component: {name}
Type: {type}
CSS selector: {selector}
Seen on: {pages}

Captured HTML structure:
{html}

Computed styles of the element:
{styles}
{design_tokens}
Return the complete `{name}.tsx` file.
{corrections}"""

SIDEBAR_HUMAN = """\
No sidebar element was tagged in the DOM of "{title}" ({url}), but the attached
screenshot shows the application's navigation. Rebuild it as `Sidebar.tsx`.

Requirements:
1. Reproduce every navigation label, grouping and section heading visible in the screenshot.
2. Use react-router-dom <Link> for navigation: "/" for Home, "/projects" for Projects,
   "/tasks" for My tasks.
3. Highlight the active item with useLocation().
4. {collapse_rule}
5. Icons from 'lucide-react' (Home, CheckSquare, Inbox, BarChart2, Folder, Users, Star, Plus, Menu).
{design_tokens}
Return the complete `Sidebar.tsx` file.
{corrections}"""

COLLAPSIBLE_RULE = (
    "The original sidebar is collapsible: keep `const [collapsed, setCollapsed] = useState(false)` "
    "and a Menu button with onClick={() => setCollapsed(!collapsed)} that narrows it to icons."
)
FIXED_RULE = "The original sidebar is always expanded: render it at a fixed width."
