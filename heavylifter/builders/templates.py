"""
Fixed source templates for generated apps.

Placeholders are ``__NAME__`` style tokens filled by render(); the
templates are JavaScript, so str.format braces are not an option.

The app name reaches the templates in three forms: ``__COMPONENT_NAME__``
(a valid JS identifier), ``__APP_TITLE__`` (a quoted JS string literal)
and ``__JSON_NAME__`` (escaped for use inside a JSON string).
"""

WEB_TODO_PAGE = """'use client'

import { useState, useEffect } from 'react'

const CATEGORIES = ['personal', 'work', 'shopping', 'health']
const STORAGE_KEY = '__APP_SLUG__-todos'

export default function __COMPONENT_NAME__() {
  const [todos, setTodos] = useState([])
  const [newTodo, setNewTodo] = useState('')
  const [category, setCategory] = useState('personal')

  useEffect(() => {
    const saved = localStorage.getItem(STORAGE_KEY)
    if (saved) setTodos(JSON.parse(saved))
  }, [])

  useEffect(() => {
    localStorage.setItem(STORAGE_KEY, JSON.stringify(todos))
  }, [todos])

  const addTodo = () => {
    if (!newTodo.trim()) return
    setTodos([...todos, {
      id: Date.now(),
      text: newTodo,
      completed: false,
      category,
      createdAt: new Date().toISOString()
    }])
    setNewTodo('')
  }

  const toggleTodo = (id) => {
    setTodos(todos.map(todo => todo.id === id ? { ...todo, completed: !todo.completed } : todo))
  }

  const deleteTodo = (id) => {
    setTodos(todos.filter(todo => todo.id !== id))
  }

  const visible = todos.filter(todo => todo.category === category)

  return (
    <main className="min-h-screen bg-gray-50 p-4">
      <div className="max-w-2xl mx-auto">
        <h1 className="text-3xl font-bold text-center mb-8">{__APP_TITLE__}</h1>

        <div className="flex gap-2 mb-4">
          {CATEGORIES.map(cat => (
            <button
              key={cat}
              onClick={() => setCategory(cat)}
              className={cat === category ? 'px-3 py-1 rounded bg-blue-500 text-white' : 'px-3 py-1 rounded bg-gray-200'}
            >
              {cat}
            </button>
          ))}
        </div>

        <div className="flex gap-2 mb-6">
          <input
            type="text"
            value={newTodo}
            onChange={(e) => setNewTodo(e.target.value)}
            onKeyDown={(e) => e.key === 'Enter' && addTodo()}
            placeholder="Add a new task..."
            className="flex-1 p-2 border rounded"
          />
          <button onClick={addTodo} className="px-4 py-2 bg-blue-500 text-white rounded">
            Add
          </button>
        </div>

        <ul className="space-y-2">
          {visible.map(todo => (
            <li key={todo.id} className="bg-white rounded shadow p-4 flex items-center gap-3">
              <input type="checkbox" checked={todo.completed} onChange={() => toggleTodo(todo.id)} />
              <span className={todo.completed ? 'flex-1 line-through text-gray-400' : 'flex-1'}>
                {todo.text}
              </span>
              <button onClick={() => deleteTodo(todo.id)} className="text-red-500">×</button>
            </li>
          ))}
        </ul>

        {visible.length === 0 && (
          <p className="text-center py-8 text-gray-500">No tasks in {category}. Add one above!</p>
        )}
      </div>
    </main>
  )
}
"""

WEB_LIST_PAGE = """'use client'

import { useState, useEffect } from 'react'

const STORAGE_KEY = '__APP_SLUG__-items'

export default function __COMPONENT_NAME__() {
  const [items, setItems] = useState([])
  const [newItem, setNewItem] = useState('')

  useEffect(() => {
    const saved = localStorage.getItem(STORAGE_KEY)
    if (saved) setItems(JSON.parse(saved))
  }, [])

  useEffect(() => {
    localStorage.setItem(STORAGE_KEY, JSON.stringify(items))
  }, [items])

  const addItem = () => {
    if (!newItem.trim()) return
    setItems([...items, { id: Date.now(), text: newItem, createdAt: new Date().toISOString() }])
    setNewItem('')
  }

  const deleteItem = (id) => {
    setItems(items.filter(item => item.id !== id))
  }

  return (
    <main className="min-h-screen bg-gray-50 p-4">
      <div className="max-w-2xl mx-auto">
        <h1 className="text-3xl font-bold text-center mb-8">{__APP_TITLE__}</h1>

        <div className="flex gap-2 mb-6">
          <input
            type="text"
            value={newItem}
            onChange={(e) => setNewItem(e.target.value)}
            onKeyDown={(e) => e.key === 'Enter' && addItem()}
            placeholder="Add a new item..."
            className="flex-1 p-2 border rounded"
          />
          <button onClick={addItem} className="px-4 py-2 bg-blue-500 text-white rounded">
            Add
          </button>
        </div>

        <ul className="space-y-2">
          {items.map(item => (
            <li key={item.id} className="bg-white rounded shadow p-4 flex justify-between">
              <div>
                <span>{item.text}</span>
                <div className="text-xs text-gray-500 mt-1">
                  {new Date(item.createdAt).toLocaleDateString()}
                </div>
              </div>
              <button onClick={() => deleteItem(item.id)} className="text-red-500">×</button>
            </li>
          ))}
        </ul>

        {items.length === 0 && (
          <p className="text-center py-8 text-gray-500">No items yet. Add one above!</p>
        )}
      </div>
    </main>
  )
}
"""

MOBILE_TODO_APP = """import React, { useState, useEffect } from 'react';
import { View, Text, TextInput, Button, FlatList, TouchableOpacity, StyleSheet, Switch } from 'react-native';
import AsyncStorage from '@react-native-async-storage/async-storage';

const CATEGORIES = ['personal', 'work', 'shopping', 'health'];
const STORAGE_KEY = '__APP_SLUG__-todos';

export default function __COMPONENT_NAME__() {
  const [todos, setTodos] = useState([]);
  const [newTodo, setNewTodo] = useState('');
  const [category, setCategory] = useState('personal');

  useEffect(() => {
    AsyncStorage.getItem(STORAGE_KEY).then(saved => {
      if (saved) setTodos(JSON.parse(saved));
    });
  }, []);

  const save = (list) => {
    setTodos(list);
    AsyncStorage.setItem(STORAGE_KEY, JSON.stringify(list));
  };

  const addTodo = () => {
    if (!newTodo.trim()) return;
    save([...todos, { id: Date.now().toString(), text: newTodo, completed: false, category }]);
    setNewTodo('');
  };

  const toggleTodo = (id) => {
    save(todos.map(todo => todo.id === id ? { ...todo, completed: !todo.completed } : todo));
  };

  const deleteTodo = (id) => {
    save(todos.filter(todo => todo.id !== id));
  };

  return (
    <View style={styles.container}>
      <Text style={styles.title}>{__APP_TITLE__}</Text>
      <View style={styles.row}>
        {CATEGORIES.map(cat => (
          <TouchableOpacity key={cat} onPress={() => setCategory(cat)}>
            <Text style={cat === category ? styles.activeTab : styles.tab}>{cat}</Text>
          </TouchableOpacity>
        ))}
      </View>
      <View style={styles.row}>
        <TextInput style={styles.input} value={newTodo} onChangeText={setNewTodo} placeholder="Add a new task..." />
        <Button title="Add" onPress={addTodo} />
      </View>
      <FlatList
        data={todos.filter(todo => todo.category === category)}
        keyExtractor={item => item.id}
        renderItem={({ item }) => (
          <View style={styles.item}>
            <Switch value={item.completed} onValueChange={() => toggleTodo(item.id)} />
            <Text style={item.completed ? styles.done : styles.text}>{item.text}</Text>
            <TouchableOpacity onPress={() => deleteTodo(item.id)}>
              <Text style={styles.delete}>×</Text>
            </TouchableOpacity>
          </View>
        )}
        ListEmptyComponent={<Text style={styles.empty}>No tasks yet. Add one above!</Text>}
      />
    </View>
  );
}

const styles = StyleSheet.create({
  container: { flex: 1, padding: 20, paddingTop: 60, backgroundColor: '#f5f5f5' },
  title: { fontSize: 28, fontWeight: 'bold', textAlign: 'center', marginBottom: 20 },
  row: { flexDirection: 'row', alignItems: 'center', gap: 8, marginBottom: 12 },
  tab: { padding: 8, color: '#555' },
  activeTab: { padding: 8, color: '#007AFF', fontWeight: 'bold' },
  input: { flex: 1, borderWidth: 1, borderColor: '#ddd', borderRadius: 6, padding: 10, backgroundColor: '#fff' },
  item: { flexDirection: 'row', alignItems: 'center', padding: 12, marginBottom: 8, borderRadius: 6, backgroundColor: '#fff' },
  text: { flex: 1, marginLeft: 8 },
  done: { flex: 1, marginLeft: 8, textDecorationLine: 'line-through', color: '#aaa' },
  delete: { fontSize: 20, color: '#FF3B30', paddingHorizontal: 8 },
  empty: { textAlign: 'center', color: '#888', padding: 20 },
});
"""

MOBILE_LIST_APP = """import React, { useState, useEffect } from 'react';
import { View, Text, TextInput, Button, FlatList, TouchableOpacity, StyleSheet } from 'react-native';
import AsyncStorage from '@react-native-async-storage/async-storage';

const STORAGE_KEY = '__APP_SLUG__-items';

export default function __COMPONENT_NAME__() {
  const [items, setItems] = useState([]);
  const [newItem, setNewItem] = useState('');

  useEffect(() => {
    AsyncStorage.getItem(STORAGE_KEY).then(saved => {
      if (saved) setItems(JSON.parse(saved));
    });
  }, []);

  const save = (list) => {
    setItems(list);
    AsyncStorage.setItem(STORAGE_KEY, JSON.stringify(list));
  };

  const addItem = () => {
    if (!newItem.trim()) return;
    save([...items, { id: Date.now().toString(), text: newItem, createdAt: new Date().toISOString() }]);
    setNewItem('');
  };

  const deleteItem = (id) => {
    save(items.filter(item => item.id !== id));
  };

  return (
    <View style={styles.container}>
      <Text style={styles.title}>{__APP_TITLE__}</Text>
      <View style={styles.row}>
        <TextInput style={styles.input} value={newItem} onChangeText={setNewItem} placeholder="Add a new item..." />
        <Button title="Add" onPress={addItem} />
      </View>
      <FlatList
        data={items}
        keyExtractor={item => item.id}
        renderItem={({ item }) => (
          <View style={styles.item}>
            <Text style={styles.text}>{item.text}</Text>
            <TouchableOpacity onPress={() => deleteItem(item.id)}>
              <Text style={styles.delete}>×</Text>
            </TouchableOpacity>
          </View>
        )}
        ListEmptyComponent={<Text style={styles.empty}>No items yet. Add one above!</Text>}
      />
    </View>
  );
}

const styles = StyleSheet.create({
  container: { flex: 1, padding: 20, paddingTop: 60, backgroundColor: '#f5f5f5' },
  title: { fontSize: 28, fontWeight: 'bold', textAlign: 'center', marginBottom: 20 },
  row: { flexDirection: 'row', alignItems: 'center', gap: 8, marginBottom: 12 },
  input: { flex: 1, borderWidth: 1, borderColor: '#ddd', borderRadius: 6, padding: 10, backgroundColor: '#fff' },
  item: { flexDirection: 'row', alignItems: 'center', padding: 12, marginBottom: 8, borderRadius: 6, backgroundColor: '#fff' },
  text: { flex: 1 },
  delete: { fontSize: 20, color: '#FF3B30', paddingHorizontal: 8 },
  empty: { textAlign: 'center', color: '#888', padding: 20 },
});
"""

WEB_PACKAGE_JSON = """{
  "name": "__APP_SLUG__",
  "version": "0.1.0",
  "private": true,
  "scripts": {
    "dev": "next dev",
    "build": "next build",
    "start": "next start",
    "lint": "next lint"
  },
  "dependencies": {
    "next": "14.0.0",
    "react": "^18",
    "react-dom": "^18"
  },
  "devDependencies": {
    "autoprefixer": "^10.0.1",
    "eslint": "^8",
    "eslint-config-next": "14.0.0",
    "postcss": "^8",
    "tailwindcss": "^3.3.0"
  }
}
"""

WEB_NEXT_CONFIG = """/** @type {import('next').NextConfig} */
const nextConfig = {
  reactStrictMode: true,
  output: 'export',
}

module.exports = nextConfig
"""

MOBILE_PACKAGE_JSON = """{
  "name": "__APP_SLUG__-__PLATFORM__",
  "version": "1.0.0",
  "main": "node_modules/expo/AppEntry.js",
  "private": true,
  "scripts": {
    "start": "expo start",
    "__PLATFORM__": "expo start --__PLATFORM__"
  },
  "dependencies": {
    "expo": "~49.0.0",
    "react": "18.2.0",
    "react-native": "0.72.0",
    "@react-native-async-storage/async-storage": "1.18.2"
  },
  "devDependencies": {
    "@babel/core": "^7.20.0"
  }
}
"""

ANDROID_APP_JSON = """{
  "expo": {
    "name": "__JSON_NAME__",
    "slug": "__APP_SLUG__",
    "version": "1.0.0",
    "platforms": ["android"],
    "android": {
      "package": "__BUNDLE_ID__",
      "versionCode": 1
    }
  }
}
"""

IOS_APP_JSON = """{
  "expo": {
    "name": "__JSON_NAME__",
    "slug": "__APP_SLUG__",
    "version": "1.0.0",
    "platforms": ["ios"],
    "ios": {
      "bundleIdentifier": "__BUNDLE_ID__",
      "buildNumber": "1",
      "supportsTablet": true
    }
  }
}
"""

WEB_INSTRUCTIONS = """Web:
  Copy the web/ folder into a new directory.
  Install dependencies, then start the dev server with `__RUN__ dev`.
  Open your browser to the local URL."""

MOBILE_INSTRUCTIONS = """__PLATFORM_LABEL__:
  Copy the __PLATFORM__/ folder into a new directory.
  Install dependencies, then run `__EXEC__ expo start`.
  Scan the QR code with your phone's camera (Expo Go app required)."""

ASSUMPTIONS = (
    "Local data saving so your work isn't lost",
    "A clean, modern interface",
    "The ability to add, view, and delete items",
)


def render(template: str, **values: str) -> str:
    """Replace ``__KEY__`` tokens with the given values (keys upper-cased)."""
    for key, value in values.items():
        template = template.replace(f"__{key.upper()}__", value)
    return template
