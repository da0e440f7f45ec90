"""create_workflow_tables

Crea las tablas del módulo de flujos de trabajo: plantillas por tipo de
servicio, órdenes activas, excepciones por orden y registros de ejecución.

Revision ID: 5c2e8b1d4f07
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c2e8b1d4f07'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'workflow_plantilla',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tipo_servicio', sa.String(length=20), nullable=False),
        sa.Column('nombre', sa.String(length=100), nullable=False),
        sa.Column('descripcion', sa.String(length=300), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tipo_servicio'),
    )
    op.create_table(
        'workflow_plantilla_fase',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('plantilla_id', sa.Integer(), nullable=False),
        sa.Column('fase_id', sa.String(length=50), nullable=False),
        sa.Column('nombre', sa.String(length=50), nullable=False),
        sa.Column('descripcion', sa.String(length=200), nullable=False),
        sa.Column('tiempo_estimado', sa.Integer(), nullable=False),
        sa.Column('orden', sa.Integer(), nullable=False),
        sa.Column('es_critica', sa.Boolean(), nullable=False),
        sa.Column('color', sa.String(length=9), nullable=True),
        sa.ForeignKeyConstraint(['plantilla_id'], ['workflow_plantilla.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('plantilla_id', 'fase_id', name='uq_plantilla_fase_id'),
    )
    op.create_table(
        'orden_trabajo',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('codigo', sa.String(length=30), nullable=False),
        sa.Column('placa', sa.String(length=15), nullable=False),
        sa.Column('cliente_nombre', sa.String(length=150), nullable=False),
        sa.Column('vehiculo_modelo', sa.String(length=150), nullable=False),
        sa.Column('tipo_servicio', sa.String(length=20), nullable=False),
        sa.Column('estado_actual', sa.String(length=100), nullable=False),
        sa.Column('fases_completadas', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('codigo'),
    )
    op.create_index('ix_orden_trabajo_placa', 'orden_trabajo', ['placa'])
    op.create_table(
        'workflow_excepcion',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('orden_trabajo_id', sa.Integer(), nullable=False),
        sa.Column('tipo_servicio', sa.String(length=20), nullable=False),
        sa.Column('modificado_por', sa.String(length=50), nullable=True),
        sa.Column('motivo', sa.String(length=300), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['orden_trabajo_id'], ['orden_trabajo.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('orden_trabajo_id'),
    )
    op.create_table(
        'workflow_excepcion_fase',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('excepcion_id', sa.Integer(), nullable=False),
        sa.Column('fase_id', sa.String(length=50), nullable=False),
        sa.Column('nombre', sa.String(length=50), nullable=False),
        sa.Column('descripcion', sa.String(length=200), nullable=False),
        sa.Column('tiempo_estimado', sa.Integer(), nullable=False),
        sa.Column('orden', sa.Integer(), nullable=False),
        sa.Column('es_critica', sa.Boolean(), nullable=False),
        sa.Column('ejecutada', sa.Boolean(), nullable=False),
        sa.Column('color', sa.String(length=9), nullable=True),
        sa.ForeignKeyConstraint(['excepcion_id'], ['workflow_excepcion.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('excepcion_id', 'fase_id', name='uq_excepcion_fase_id'),
    )
    op.create_table(
        'ejecucion_fase',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('orden_trabajo_id', sa.Integer(), nullable=False),
        sa.Column('fase_id', sa.String(length=50), nullable=False),
        sa.Column('fase_nombre', sa.String(length=50), nullable=False),
        sa.Column('observaciones', sa.Text(), nullable=False),
        sa.Column('registrado_por', sa.String(length=50), nullable=True),
        sa.Column('fecha_fin', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['orden_trabajo_id'], ['orden_trabajo.id']),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    op.drop_table('ejecucion_fase')
    op.drop_table('workflow_excepcion_fase')
    op.drop_table('workflow_excepcion')
    op.drop_index('ix_orden_trabajo_placa', table_name='orden_trabajo')
    op.drop_table('orden_trabajo')
    op.drop_table('workflow_plantilla_fase')
    op.drop_table('workflow_plantilla')
