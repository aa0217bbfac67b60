"""Deterministic source templates used when generation is skipped or fails.

Pure Python string templates; no LLM involved, always valid TSX.
"""

import re
import textwrap

PLACEHOLDER_COMPONENT = textwrap.dedent("""\
    import React from 'react';

    interface {name}Props {
      className?: string;
    }

    const {name}: React.FC<{name}Props> = ({ className = '' }) => {
      return (
        <div className={`{css_type} ${className}`}>
          <p className="text-gray-600">{name} component</p>
        </div>
      );
    };

    export default {name};
    """)

PLACEHOLDER_PAGE = textwrap.dedent("""\
    import React from 'react';
    {imports}

    const {name}: React.FC = () => {
      return (
        <div className="min-h-screen bg-gray-50">
    {usage}
          <main className="p-8">
            <h1 className="text-2xl font-semibold text-gray-800">{title}</h1>
          </main>
        </div>
      );
    };

    export default {name};
    """)

BUTTON_COMPONENT = textwrap.dedent("""\
    import React from 'react';

    interface ButtonProps {
      children: React.ReactNode;
      onClick?: () => void;
      variant?: 'primary' | 'secondary';
      className?: string;
    }

    const Button: React.FC<ButtonProps> = ({
      children,
      onClick,
      variant = 'primary',
      className = '',
    }) => {
      const styles =
        variant === 'primary'
          ? 'bg-app-accent-primary text-white hover:opacity-90'
          : 'bg-gray-200 text-gray-800 hover:bg-gray-300';
      return (
        <button
          onClick={onClick}
          className={`px-4 py-2 rounded-lg transition-colors ${styles} ${className}`}
        >
          {children}
        </button>
      );
    };

    export default Button;
    """)

SIDEBAR_COMPONENT = textwrap.dedent("""\
    import React from 'react';
    import { Link, useLocation } from 'react-router-dom';
    import { Home, CheckSquare, Folder } from 'lucide-react';

    const links = [
      { to: '/', label: 'Home', icon: Home },
      { to: '/tasks', label: 'My tasks', icon: CheckSquare },
      { to: '/projects', label: 'Projects', icon: Folder },
    ];

    const Sidebar: React.FC = () => {
      const location = useLocation();
      return (
        <aside className="w-60 h-screen bg-gray-900 text-gray-100 flex flex-col p-3">
          {links.map(({ to, label, icon: Icon }) => (
            <Link
              key={to}
              to={to}
              className={`flex items-center gap-2 px-3 py-2 rounded-md hover:bg-gray-800 ${
                location.pathname === to ? 'bg-gray-800' : ''
              }`}
            >
              <Icon size={16} />
              {label}
            </Link>
          ))}
        </aside>
      );
    };

    export default Sidebar;
    """)

HEADER_COMPONENT = textwrap.dedent("""\
    import React from 'react';
    import { Search, Bell } from 'lucide-react';

    interface HeaderProps {
      title?: string;
      className?: string;
    }

    const Header: React.FC<HeaderProps> = ({ title = '', className = '' }) => {
      return (
        <header className={`h-14 flex items-center justify-between px-6 border-b bg-white ${className}`}>
          <h1 className="text-lg font-medium text-gray-800">{title}</h1>
          <div className="flex items-center gap-4 text-gray-500">
            <Search size={18} />
            <Bell size={18} />
          </div>
        </header>
      );
    };

    export default Header;
    """)

TASK_DETAIL_PAGE = textwrap.dedent("""\
    import React, { useState } from 'react';
    import { useParams, useNavigate } from 'react-router-dom';
    import { Header, Sidebar } from '../components';

    interface Subtask {
      id: number;
      title: string;
      completed: boolean;
    }

    const TaskDetailPage: React.FC = () => {
      const { id } = useParams<{ id: string }>();
      const navigate = useNavigate();
      const [task, setTask] = useState({
        id: Number(id ?? 1),
        title: 'Task',
        completed: false,
        description: '',
      });
      const [items, setItems] = useState<Subtask[]>([]);
      const [draft, setDraft] = useState('');

      const toggleTask = () => setTask({ ...task, completed: !task.completed });
      const addItem = () => {
        if (!draft.trim()) return;
        setItems([...items, { id: Date.now(), title: draft.trim(), completed: false }]);
        setDraft('');
      };
      const toggleItem = (itemId: number) =>
        setItems(items.map(s => (s.id === itemId ? { ...s, completed: !s.completed } : s)));
      const deleteItem = (itemId: number) => setItems(items.filter(s => s.id !== itemId));

      return (
        <div className="flex h-screen">
          <Sidebar />
          <div className="flex-1 flex flex-col">
            <Header />
            <main className="flex-1 overflow-auto p-8 max-w-3xl">
              <button onClick={() => navigate('/tasks')} className="text-sm text-gray-500 mb-4">
                Back to tasks
              </button>
              <div className="flex items-center gap-3 mb-4">
                <input type="checkbox" checked={task.completed} onChange={toggleTask} />
                <input
                  type="text"
                  value={task.title}
                  onChange={e => setTask({ ...task, title: e.target.value })}
                  className="text-2xl font-semibold flex-1 outline-none"
                />
              </div>
              <textarea
                value={task.description}
                onChange={e => setTask({ ...task, description: e.target.value })}
                placeholder="Add a description"
                className="w-full border rounded-md p-3 mb-6"
              />
              <h2 className="font-medium mb-2">Subtasks</h2>
              {items.map(s => (
                <div key={s.id} className="flex items-center gap-2 py-1">
                  <input type="checkbox" checked={s.completed} onChange={() => toggleItem(s.id)} />
                  <span className={s.completed ? 'line-through text-gray-400' : ''}>{s.title}</span>
                  <button onClick={() => deleteItem(s.id)} className="ml-auto text-gray-400">
                    Delete
                  </button>
                </div>
              ))}
              <div className="flex gap-2 mt-3">
                <input
                  type="text"
                  value={draft}
                  onChange={e => setDraft(e.target.value)}
                  className="flex-1 border rounded-md px-3 py-1"
                />
                <button onClick={addItem} className="px-3 py-1 rounded-md bg-gray-900 text-white">
                  Add
                </button>
              </div>
            </main>
          </div>
        </div>
      );
    };

    export default TaskDetailPage;
    """)


def _fill(template: str, **values: str) -> str:
    out = template
    for key, value in values.items():
        out = out.replace("{" + key + "}", value)
    return out


def safe_title(title: str) -> str:
    return re.sub(r"[{}<>`]", "", title).strip() or "Page"


def placeholder_component(name: str, component_type: str) -> str:
    return _fill(PLACEHOLDER_COMPONENT, name=name, css_type=component_type)


def placeholder_page(name: str, title: str, components: list[str]) -> str:
    layout = [c for c in ("Sidebar", "Header") if c in components]
    imports = f"import {{ {', '.join(layout)} }} from '../components';" if layout else ""
    usage = "\n".join(f"      <{c} />" for c in layout)
    return _fill(PLACEHOLDER_PAGE, name=name, imports=imports, usage=usage, title=safe_title(title))
