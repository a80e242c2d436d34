"""
数据库连接和管理模块
基于 DuckDB，提供表结构定义、事务、查询辅助以及"归属即成员"检查

数据库表说明：
- users / buyers / vendors: 账户与买家、商家档案
- menu_items: 菜品（expire_at 不为空表示已软删除，等待清理）
- carts / cart_items: 购物车及其菜品数量
- orders: 订单（商家通过 carts.vendor_id 推导）
- vendor_menu / vendor_cuisines / vendor_orders: 商家的有序引用列表
- buyer_carts / buyer_saved_vendors / buyer_orders: 买家的有序引用列表
- logs: 操作日志
"""

import json
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

import duckdb
import structlog
from fastapi import Request

from .exceptions import BaseApplicationError, DatabaseError

logger = structlog.get_logger(__name__)

# 完整的表结构定义
# 引用列表使用独立的关联表，position 保证插入顺序
SCHEMA_SQL = r"""
CREATE SEQUENCE IF NOT EXISTS link_position_seq;
CREATE SEQUENCE IF NOT EXISTS logs_id_seq;

CREATE TABLE IF NOT EXISTS users (
  id TEXT PRIMARY KEY,
  email TEXT UNIQUE,
  google_id TEXT,
  github_id TEXT,
  password TEXT,
  buyer_id TEXT,
  vendor_id TEXT,
  created_at TIMESTAMP DEFAULT now(),
  CHECK (email IS NOT NULL OR google_id IS NOT NULL OR github_id IS NOT NULL)
);

CREATE TABLE IF NOT EXISTS buyers (
  id TEXT PRIMARY KEY,
  buyer_name TEXT NOT NULL,
  address TEXT NOT NULL,
  phone_number TEXT,
  created_at TIMESTAMP DEFAULT now()
);

CREATE TABLE IF NOT EXISTS vendors (
  id TEXT PRIMARY KEY,
  vendor_name TEXT NOT NULL,
  address TEXT NOT NULL,
  price_range TEXT CHECK(price_range IN ('$','$$','$$$')) NOT NULL,
  phone_number TEXT,
  description TEXT,
  created_at TIMESTAMP DEFAULT now()
);

CREATE TABLE IF NOT EXISTS menu_items (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  price DOUBLE NOT NULL CHECK(price > 0),
  available BOOLEAN NOT NULL,
  category TEXT NOT NULL,
  description TEXT,
  expire_at TIMESTAMP,
  created_at TIMESTAMP DEFAULT now()
);

CREATE TABLE IF NOT EXISTS carts (
  id TEXT PRIMARY KEY,
  vendor_id TEXT NOT NULL,
  saved_for_later BOOLEAN NOT NULL DEFAULT FALSE,
  created_at TIMESTAMP DEFAULT now()
);

CREATE TABLE IF NOT EXISTS cart_items (
  cart_id TEXT NOT NULL,
  menu_item_id TEXT NOT NULL,
  quantity INTEGER NOT NULL CHECK(quantity > 0),
  position BIGINT DEFAULT nextval('link_position_seq')
);

CREATE INDEX IF NOT EXISTS idx_cart_items_cart ON cart_items(cart_id);

CREATE TABLE IF NOT EXISTS orders (
  id TEXT PRIMARY KEY,
  buyer_id TEXT NOT NULL,
  cart_id TEXT NOT NULL,
  total_price DOUBLE NOT NULL,
  date TIMESTAMP NOT NULL,
  status INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS vendor_menu (
  vendor_id TEXT NOT NULL,
  menu_item_id TEXT NOT NULL,
  position BIGINT DEFAULT nextval('link_position_seq')
);

CREATE TABLE IF NOT EXISTS vendor_cuisines (
  vendor_id TEXT NOT NULL,
  cuisine TEXT NOT NULL,
  position BIGINT DEFAULT nextval('link_position_seq')
);

CREATE TABLE IF NOT EXISTS vendor_orders (
  vendor_id TEXT NOT NULL,
  order_id TEXT NOT NULL,
  position BIGINT DEFAULT nextval('link_position_seq')
);

CREATE TABLE IF NOT EXISTS buyer_carts (
  buyer_id TEXT NOT NULL,
  cart_id TEXT NOT NULL,
  position BIGINT DEFAULT nextval('link_position_seq')
);

CREATE TABLE IF NOT EXISTS buyer_saved_vendors (
  buyer_id TEXT NOT NULL,
  vendor_id TEXT NOT NULL,
  position BIGINT DEFAULT nextval('link_position_seq')
);

CREATE TABLE IF NOT EXISTS buyer_orders (
  buyer_id TEXT NOT NULL,
  order_id TEXT NOT NULL,
  position BIGINT DEFAULT nextval('link_position_seq')
);

CREATE TABLE IF NOT EXISTS logs (
  log_id INTEGER DEFAULT nextval('logs_id_seq') PRIMARY KEY,
  user_id TEXT,
  actor_id TEXT,
  action TEXT,
  detail_json JSON,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_logs_user ON logs(user_id);
CREATE INDEX IF NOT EXISTS idx_logs_actor ON logs(actor_id);
"""

# 关联表及其父/子列，find_owned 等方法只接受这里登记的表
LINK_TABLES = {
    "vendor_menu": ("vendor_id", "menu_item_id"),
    "vendor_cuisines": ("vendor_id", "cuisine"),
    "vendor_orders": ("vendor_id", "order_id"),
    "buyer_carts": ("buyer_id", "cart_id"),
    "buyer_saved_vendors": ("buyer_id", "vendor_id"),
    "buyer_orders": ("buyer_id", "order_id"),
}


def _columns(link_table: str):
    try:
        return LINK_TABLES[link_table]
    except KeyError:
        raise DatabaseError(f"Unknown link table: {link_table}")


class DatabaseManager:
    """数据库管理器，封装所有数据库操作"""

    def __init__(self, database_url: str = "duckdb://:memory:"):
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = threading.RLock()
        self._tx_depth = 0
        self.db_path = self._get_db_path(database_url)

    @staticmethod
    def _get_db_path(database_url: str) -> str:
        """从连接串中解析数据库路径"""
        db_path = database_url
        if db_path.startswith("duckdb://"):
            db_path = db_path.replace("duckdb://", "", 1)
        return db_path

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        """获取数据库连接"""
        with self._lock:
            if self._connection is None:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                self._connection = duckdb.connect(self.db_path)
                self._init_schema()
            return self._connection

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        return self.connection

    def _init_schema(self):
        """初始化数据库表结构"""
        try:
            self._connection.execute(SCHEMA_SQL)
        except duckdb.Error as e:
            raise DatabaseError(f"Failed to initialize schema: {e}")

    def init_database(self):
        """初始化数据库（建立连接时会自动建表）"""
        self.get_connection()
        logger.info("database_initialized", db_path=self.db_path)

    def close(self):
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    @contextmanager
    def transaction(self) -> Generator[duckdb.DuckDBPyConnection, None, None]:
        """
        数据库事务上下文管理器
        持有锁直到提交或回滚；嵌套调用复用外层事务
        """
        with self._lock:
            conn = self.connection
            if self._tx_depth:
                self._tx_depth += 1
                try:
                    yield conn
                finally:
                    self._tx_depth -= 1
                return

            conn.execute("BEGIN TRANSACTION")
            self._tx_depth = 1
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseApplicationError:
                conn.execute("ROLLBACK")
                raise
            except duckdb.Error as e:
                conn.execute("ROLLBACK")
                raise DatabaseError(f"Database operation failed: {e}")
            except Exception:
                conn.execute("ROLLBACK")
                raise
            finally:
                self._tx_depth = 0

    def execute_query(self, query: str, params: list = None) -> list:
        """执行查询并返回全部结果"""
        with self._lock:
            try:
                return self.connection.execute(query, params or []).fetchall()
            except duckdb.Error as e:
                raise DatabaseError(f"Query execution failed: {e}")

    def execute_one(self, query: str, params: list = None) -> Optional[tuple]:
        """执行查询并返回单条结果"""
        with self._lock:
            try:
                return self.connection.execute(query, params or []).fetchone()
            except duckdb.Error as e:
                raise DatabaseError(f"Query execution failed: {e}")

    def fetch_dicts(self, query: str, params: list = None) -> List[Dict[str, Any]]:
        """执行查询，按列名返回字典列表"""
        with self._lock:
            try:
                cursor = self.connection.execute(query, params or [])
                rows = cursor.fetchall()
                names = [col[0] for col in cursor.description]
            except duckdb.Error as e:
                raise DatabaseError(f"Query execution failed: {e}")
        return [dict(zip(names, row)) for row in rows]

    def fetch_dict(self, query: str, params: list = None) -> Optional[Dict[str, Any]]:
        rows = self.fetch_dicts(query, params)
        return rows[0] if rows else None

    @staticmethod
    def new_id() -> str:
        """生成新的文档ID（32位十六进制）"""
        return uuid.uuid4().hex

    # ---- 引用列表 ----

    def find_owned(self, link_table: str, parent_id: str, child_id: str) -> Optional[str]:
        """
        在父对象的引用列表中查找子对象

        Returns:
            子对象ID；不存在或不属于该父对象时返回 None，两种情况不作区分
        """
        parent_col, child_col = _columns(link_table)
        row = self.execute_one(
            f"SELECT {child_col} FROM {link_table} WHERE {parent_col}=? AND {child_col}=? LIMIT 1",
            [parent_id, child_id]
        )
        return row[0] if row else None

    def list_links(self, link_table: str, parent_id: str) -> List[str]:
        """按插入顺序返回父对象的引用列表"""
        parent_col, child_col = _columns(link_table)
        rows = self.execute_query(
            f"SELECT {child_col} FROM {link_table} WHERE {parent_col}=? ORDER BY position",
            [parent_id]
        )
        return [row[0] for row in rows]

    def add_link(self, link_table: str, parent_id: str, child_id: str):
        """在引用列表末尾追加"""
        parent_col, child_col = _columns(link_table)
        self.execute_query(
            f"INSERT INTO {link_table}({parent_col}, {child_col}) VALUES (?, ?)",
            [parent_id, child_id]
        )

    def remove_link(self, link_table: str, parent_id: str, child_id: str = None):
        """从引用列表移除一项；child_id 为空时清空整个列表"""
        parent_col, child_col = _columns(link_table)
        if child_id is None:
            self.execute_query(f"DELETE FROM {link_table} WHERE {parent_col}=?", [parent_id])
        else:
            self.execute_query(
                f"DELETE FROM {link_table} WHERE {parent_col}=? AND {child_col}=?",
                [parent_id, child_id]
            )

    def toggle_link(self, link_table: str, parent_id: str, child_id: str) -> bool:
        """存在则移除，不存在则追加；返回操作后是否存在"""
        with self.transaction():
            if self.find_owned(link_table, parent_id, child_id) is not None:
                self.remove_link(link_table, parent_id, child_id)
                return False
            self.add_link(link_table, parent_id, child_id)
            return True

    # ---- 操作日志 ----

    def log_action(self, action: str, detail: Dict[str, Any] = None,
                   user_id: str = None, actor_id: str = None):
        """记录操作日志"""
        self.execute_query(
            "INSERT INTO logs(user_id, actor_id, action, detail_json) VALUES (?,?,?,?)",
            [user_id, actor_id, action, json.dumps(detail or {}, default=str)]
        )

    # ---- 软删除清理 ----

    def purge_expired_menu_items(self, now: datetime = None) -> int:
        """
        物理删除 expire_at 已过期的菜品，返回删除数量

        买家有效购物车中引用这些菜品的条目一并删除，因此变空的购物车
        连同买家引用一起删除。已下单购物车保持不变。
        """
        now = now or datetime.now()
        emptied = []
        with self.transaction() as conn:
            expired = [row[0] for row in conn.execute(
                "SELECT id FROM menu_items WHERE expire_at IS NOT NULL AND expire_at <= ?",
                [now]
            ).fetchall()]
            if expired:
                marks = ",".join("?" * len(expired))
                affected = conn.execute(
                    f"""
                    SELECT DISTINCT ci.cart_id FROM cart_items ci
                    JOIN buyer_carts bc ON bc.cart_id = ci.cart_id
                    WHERE ci.menu_item_id IN ({marks})
                    """,
                    expired
                ).fetchall()
                for (cart_id,) in affected:
                    conn.execute(
                        f"DELETE FROM cart_items WHERE cart_id=? AND menu_item_id IN ({marks})",
                        [cart_id, *expired]
                    )
                    if conn.execute(
                        "SELECT COUNT(*) FROM cart_items WHERE cart_id=?", [cart_id]
                    ).fetchone()[0] == 0:
                        conn.execute("DELETE FROM buyer_carts WHERE cart_id=?", [cart_id])
                        conn.execute("DELETE FROM carts WHERE id=?", [cart_id])
                        emptied.append(cart_id)
                conn.execute(f"DELETE FROM menu_items WHERE id IN ({marks})", expired)
        if expired:
            logger.info("menu_items_purged", count=len(expired), carts_removed=len(emptied))
        return len(expired)


def get_db(request: Request) -> DatabaseManager:
    """路由依赖：获取应用绑定的数据库管理器"""
    return request.app.state.db
