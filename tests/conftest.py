"""Shared test fixtures for promptpack."""

from __future__ import annotations

from pathlib import Path

import pytest

from promptpack.context.models import SourceKind, SourceUnit

JAVA_SOURCE = '''package com.example.shop;

import java.util.List;
import java.util.ArrayList;

/**
 * Keeps track of orders for a customer.
 */
public class OrderService extends BaseService implements Auditable, Closeable {
    private final List<Order> orders = new ArrayList<>();
    private int retries;

    public OrderService(int retries) {
        this.retries = retries;
    }

    @Override
    public List<Order> findAll() {
        if (orders.isEmpty()) {
            return List.of();
        }
        return orders;
    }

    // not a declaration
    public void place(Order order, Customer customer) {
        orders.add(order);
    }
}

interface Auditable {
    void audit();
}
'''

TS_SOURCE = '''import { Injectable } from "@angular/core";
import * as path from 'path';

export const DEFAULT_TIMEOUT = 30;

export interface Repository<T> extends Disposable, Iterable<T> {
  find(id: string): T;
}

export type UserId = string;

export class UserService extends BaseService {
  static instances = 0;
  private cache = new Map();

  constructor(private readonly repo: Repository<User>) {
    super();
  }

  get size(): number {
    return this.cache.size;
  }

  set size(value: number) {}

  static create(): UserService {
    return new UserService(null);
  }

  find(id: string, fresh?: boolean) {
    const local = this.cache.get(id);
    return local;
  }
}

export function formatUser({ name, email }: User, prefix: string): string {
  let label = prefix + name;
  return label;
}

let counter = 0;
'''


@pytest.fixture
def java_source() -> str:
    return JAVA_SOURCE


@pytest.fixture
def ts_source() -> str:
    return TS_SOURCE


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create a temporary project tree with a mix of source files."""
    (tmp_path / "package.json").write_text('{"name": "shop", "version": "1.0.0"}\n')

    src = tmp_path / "src"
    src.mkdir()
    (src / "index.ts").write_text(
        'import { UserService } from "./user.service";\n\n'
        "export function main(args: string[]) {\n"
        "  return new UserService(null);\n"
        "}\n"
    )
    (src / "user.service.ts").write_text(TS_SOURCE)
    (src / "helpers.js").write_text(
        "const path = require('path');\n\n"
        "function join(a, b) {\n"
        "  return path.join(a, b);\n"
        "}\n\n"
        "module.exports = { join };\n"
    )
    (src / "OrderService.java").write_text(JAVA_SOURCE)
    (src / "notes.txt").write_text("not collected: extension is not tracked\n")

    tests = tmp_path / "__tests__"
    tests.mkdir()
    (tests / "index.test.ts").write_text(
        'import { main } from "../src/index";\n\n'
        "export function checkMain() {\n"
        "  return main([]);\n"
        "}\n"
    )

    excluded = tmp_path / "node_modules" / "lib"
    excluded.mkdir(parents=True)
    (excluded / "index.js").write_text("module.exports = 1;\n")

    return tmp_path


@pytest.fixture
def make_unit():
    """Factory for SourceUnits with a given name and content."""

    def _make(
        name: str,
        content: str = "x",
        kind: SourceKind = SourceKind.SOURCE,
        directory: str = "/project/src",
    ) -> SourceUnit:
        return SourceUnit.from_path(f"{directory}/{name}", content, kind)

    return _make
